import os
from dotenv import load_dotenv

load_dotenv()


def _parse_ids(raw: str | None) -> list[int]:
    return [int(i) for i in (raw or "").split(",") if i.strip()]


class Config:
    DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
    OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
    OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "openai/gpt-3.5-turbo")
    OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    SUMMARY_MAX_TOKENS = int(os.getenv("SUMMARY_MAX_TOKENS", "500"))
    SUMMARY_TEMPERATURE = float(os.getenv("SUMMARY_TEMPERATURE", "0.7"))
    CONFIG_PATH = os.getenv("CONFIG_PATH", "data/config.json")
    SUMMARY_CHANNEL_ID = int(os.getenv("SUMMARY_CHANNEL_ID")) if os.getenv("SUMMARY_CHANNEL_ID", "").strip() else None
    MONITORED_CHANNEL_IDS = _parse_ids(os.getenv("MONITORED_CHANNEL_IDS"))
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    PORT = int(os.getenv("PORT", "3000"))
    DEBUG_GUILD_IDS = _parse_ids(os.getenv("DEBUG_GUILD_IDS"))

    @classmethod
    def validate_discord(cls):
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is missing")
        if not cls.OPENROUTER_API_KEY:
            raise ValueError("OPENROUTER_API_KEY is missing")


config = Config()
