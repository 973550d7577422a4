import logging
from datetime import datetime

import discord

from ..types import ChatLogEntry
from ..utils.constants import HISTORY_PAGE_SIZE

logger = logging.getLogger("tldr.history")


def is_text_capable(channel) -> bool:
    """True for channels that have a message history we can read."""
    return isinstance(channel, discord.abc.Messageable)


class HistoryFetcher:
    """
    Walks a channel's history backwards from the newest message and collects
    human-authored messages posted after a cutoff.
    """

    def __init__(self, page_size: int = HISTORY_PAGE_SIZE):
        self.page_size = page_size

    async def fetch_messages(self, channel, start_time: datetime) -> list[ChatLogEntry]:
        """
        Fetch messages newer than `start_time`, oldest first.

        Bot-authored messages are always dropped. Pagination ends when a page
        is empty, reaches past `start_time`, or comes back short.
        """
        if not is_text_capable(channel):
            logger.debug(f"Channel {getattr(channel, 'id', '?')} is not text-capable, skipping")
            return []

        collected: list[ChatLogEntry] = []
        before = None

        while True:
            page = [msg async for msg in channel.history(limit=self.page_size, before=before)]
            if not page:
                break

            for msg in page:
                if msg.created_at > start_time and not msg.author.bot:
                    collected.append(ChatLogEntry(
                        authored_at=msg.created_at,
                        author_name=msg.author.name,
                        author_is_bot=msg.author.bot,
                        body=msg.content,
                    ))

            # Pages arrive newest first
            oldest = page[-1]
            if oldest.created_at < start_time:
                break

            before = oldest

            if len(page) < self.page_size:
                break

        collected.sort(key=lambda entry: entry.authored_at)
        logger.debug(f"Fetched {len(collected)} messages from #{getattr(channel, 'name', channel)}")
        return collected
