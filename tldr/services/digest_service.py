"""
Digest pipeline: collects recent messages from the monitored channels,
summarizes each channel and posts one digest to the destination channel.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Protocol
from zoneinfo import ZoneInfo

import discord

from .ai import AIService, format_transcript
from .config_store import ConfigStore
from .history import HistoryFetcher, is_text_capable
from ..types import (
    ChannelDigestInput,
    ChannelSummary,
    DigestBlock,
    DigestOutcome,
    DigestPost,
    DigestResult,
    DigestStatus,
)
from ..utils.constants import DEFAULT_WINDOW_SECONDS

logger = logging.getLogger("tldr.digest_service")


class ChannelProvider(Protocol):
    """Platform side of a digest run: channel lookup and posting."""

    async def resolve_channel(self, channel_id: int) -> Any | None: ...

    async def post_digest(self, channel: Any, post: DigestPost) -> None: ...


class DigestService:
    """
    Runs the digest pipeline. Reads configuration but never writes it;
    whoever triggered the run decides whether to advance the window.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        ai_service: AIService,
        history: HistoryFetcher | None = None,
        display_tz: tzinfo | None = None,
    ):
        self.config_store = config_store
        self.ai_service = ai_service
        self.history = history or HistoryFetcher()
        self.display_tz = display_tz or ZoneInfo("UTC")
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def get_window_start(self, last_summary_time: datetime | None, now: datetime) -> datetime:
        """Start from the last successful digest, or one hour back if there was none."""
        if last_summary_time:
            return last_summary_time
        return now - timedelta(seconds=DEFAULT_WINDOW_SECONDS)

    def format_timestamp(self, moment: datetime) -> str:
        return moment.astimezone(self.display_tz).strftime("%Y-%m-%d %H:%M %Z")

    async def run(self, provider: ChannelProvider) -> DigestOutcome:
        """Execute one digest run. Rejects the request if a run is already in progress."""
        if self._run_lock.locked():
            logger.info("Digest run requested while another is in progress, skipping")
            return DigestOutcome(DigestStatus.BUSY, "A digest is already being generated.")

        async with self._run_lock:
            return await self._run(provider)

    async def _run(self, provider: ChannelProvider) -> DigestOutcome:
        settings = self.config_store.get()

        if not settings.summary_channel_id:
            logger.warning("No summary channel configured. Skipping digest.")
            return DigestOutcome(DigestStatus.NOT_CONFIGURED, "No summary channel configured.")

        if not settings.monitored_channel_ids:
            logger.warning("No channels are being monitored. Skipping digest.")
            return DigestOutcome(DigestStatus.NOT_CONFIGURED, "No channels are being monitored.")

        destination = await provider.resolve_channel(settings.summary_channel_id)
        if destination is None or not is_text_capable(destination):
            logger.error(f"Summary channel {settings.summary_channel_id} not found or not a text channel")
            return DigestOutcome(DigestStatus.DESTINATION_UNAVAILABLE, "Summary channel could not be found.")

        now = datetime.now(timezone.utc)
        start_time = self.get_window_start(settings.last_summary_time, now)
        logger.info(f"Building digest for messages since {start_time.isoformat()}")

        inputs, total_messages = await self.collect_inputs(provider, settings.monitored_channel_ids, start_time)

        if total_messages == 0:
            logger.info("No new messages found in monitored channels. Skipping digest.")
            return DigestOutcome(DigestStatus.QUIET, "No new messages to summarize.", window_end=now)

        summaries = await self.summarize_inputs(inputs)
        if not summaries:
            logger.warning("No summaries were generated")
            return DigestOutcome(DigestStatus.SUMMARIES_FAILED, "Every summary request failed.", window_end=now)

        result = DigestResult(summaries=summaries, total_messages=total_messages, generated_at=now)
        post = self.build_post(result)

        try:
            await provider.post_digest(destination, post)
        except discord.HTTPException as e:
            logger.error(f"Failed to post digest: {e}")
            return DigestOutcome(DigestStatus.POST_FAILED, "Could not post to the summary channel.", result, now)

        logger.info(f"Digest posted ({len(summaries)} channels, {total_messages} messages)")
        return DigestOutcome(DigestStatus.POSTED, "Digest posted.", result, now)

    async def collect_inputs(
        self,
        provider: ChannelProvider,
        channel_ids: tuple[int, ...],
        start_time: datetime,
    ) -> tuple[list[ChannelDigestInput], int]:
        """Fetch history channel by channel, keeping list order. Broken channels are skipped."""
        inputs = []
        total = 0

        for channel_id in channel_ids:
            channel = await provider.resolve_channel(channel_id)
            if channel is None or not is_text_capable(channel):
                logger.warning(f"Skipping channel {channel_id}: not found or not a text channel")
                continue

            try:
                messages = await self.history.fetch_messages(channel, start_time)
            except Exception as e:
                logger.error(f"Error fetching messages from channel {channel_id}: {e}")
                continue

            if messages:
                inputs.append(ChannelDigestInput(channel_id=channel_id, channel_name=channel.name, messages=messages))
                total += len(messages)

        return inputs, total

    async def summarize_inputs(self, inputs: list[ChannelDigestInput]) -> list[ChannelSummary]:
        summaries = []
        for item in inputs:
            transcript = format_transcript(item.messages, self.display_tz)
            summary = await self.ai_service.summarize(transcript, item.channel_name)
            if summary is None:
                logger.warning(f"No summary for #{item.channel_name}, omitting it from the digest")
                continue
            summaries.append(ChannelSummary(
                channel_name=item.channel_name,
                summary=summary,
                message_count=len(item.messages),
            ))
        return summaries

    def build_post(self, result: DigestResult) -> DigestPost:
        stamp = self.format_timestamp(result.generated_at)
        blocks = [
            DigestBlock(
                title=f"Summary for #{s.channel_name}",
                body=s.summary,
                footer=f"{s.message_count} messages summarized • {stamp}",
            )
            for s in result.summaries
        ]
        return DigestPost(header=f"# TLDR Summary {stamp}", blocks=blocks)
