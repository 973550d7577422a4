from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, RateLimitError
from zoneinfo import ZoneInfo
from datetime import tzinfo
import logging

from ..types import ChatLogEntry
from ..utils.constants import SUMMARY_SYSTEM_PROMPT
from ..utils.decorators import async_retry

logger = logging.getLogger("tldr.ai")


def format_transcript(messages: list[ChatLogEntry], tz: tzinfo | None = None) -> str:
    """Render messages as `[HH:MM:SS] author: body`, one per line."""
    tz = tz or ZoneInfo("UTC")
    return "\n".join(
        f"[{msg.authored_at.astimezone(tz).strftime('%H:%M:%S')}] {msg.author_name}: {msg.body}"
        for msg in messages
    )


class AIService:
    """
    Thin wrapper around an OpenRouter (OpenAI-compatible) chat completion
    endpoint, used only to summarize chat transcripts.
    """
    def __init__(self, api_key: str, model: str, base_url: str, max_tokens: int = 500, temperature: float = 0.7):
        self.client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        logger.info(f"AI client initialized (model: {model})")

    async def summarize(self, text: str, context_label: str) -> str | None:
        """
        Summarize a formatted transcript from the channel named `context_label`.
        Returns None when the provider fails; never raises.
        """
        try:
            summary = await self._summarize_internal(text, context_label)
        except Exception as e:
            logger.error(f"Error generating summary for #{context_label}: {e}")
            return None

        if not summary:
            logger.warning(f"Empty summary returned for #{context_label}")
            return None
        return summary

    @async_retry(retries=2, delay=1.0, exceptions=(APIConnectionError, APITimeoutError, RateLimitError))
    async def _summarize_internal(self, text: str, context_label: str) -> str:
        prompt = (
            f"Summarize the following Discord chat from the #{context_label} channel. "
            "Focus on the main topics, key points, and any decisions or action items. "
            "Keep the summary concise but informative:\n\n"
            f"{text}\n\n"
            "Summary:"
        )

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        if not response or not response.choices:
            raise ValueError(f"Invalid response from API: {response}")

        return (response.choices[0].message.content or "").strip()
