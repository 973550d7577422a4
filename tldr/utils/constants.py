"""
Platform limits and digest constants.
"""
from datetime import time, timezone

# Discord API caps
HISTORY_PAGE_SIZE = 100
DISCORD_EMBEDS_PER_MESSAGE = 10
DISCORD_EMBED_DESCRIPTION_LIMIT = 4096
DISCORD_EMBED_TOTAL_LIMIT = 6000

# Digest window used when no previous digest has been recorded (seconds)
DEFAULT_WINDOW_SECONDS = 3600

# Scheduler fires at the top of every hour
HOURLY_RUN_TIMES = [time(hour=h, tzinfo=timezone.utc) for h in range(24)]

EMBED_COLOR = 0x5865F2
KEEPALIVE_MESSAGE = "TLDR Bot is running!"

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes Discord conversations "
    "accurately and concisely."
)
