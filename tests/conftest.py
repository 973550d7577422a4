import os
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, AsyncMock

os.environ["OPENROUTER_API_KEY"] = "sk-test-key"
os.environ["DISCORD_TOKEN"] = "test-token"
os.environ["CONFIG_PATH"] = "data/test-config.json"

import discord

from tldr.types import BotSettings


class AsyncIter:
    """Stands in for py-cord's HistoryIterator."""
    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self._aiter()

    async def _aiter(self):
        for item in self._items:
            yield item


def make_message(created_at: datetime, author: str = "alice", bot: bool = False, content: str = "hi"):
    message = MagicMock()
    message.created_at = created_at
    message.author.name = author
    message.author.bot = bot
    message.content = content
    return message


def make_text_channel(channel_id: int, name: str, messages: list | None = None, page_size: int = 100):
    """
    A text channel whose history() serves `messages` (newest first) in pages,
    honouring the `before` cursor the way Discord does.
    """
    channel = MagicMock(spec=discord.TextChannel)
    channel.id = channel_id
    channel.name = name
    channel.mention = f"<#{channel_id}>"
    channel.send = AsyncMock()
    ordered = sorted(messages or [], key=lambda m: m.created_at, reverse=True)

    def history(limit=100, before=None):
        items = ordered
        if before is not None:
            items = [m for m in ordered if m.created_at < before.created_at]
        return AsyncIter(items[:limit])

    channel.history = MagicMock(side_effect=history)
    return channel


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def hours_ago(now):
    def _hours_ago(hours: float) -> datetime:
        return now - timedelta(hours=hours)
    return _hours_ago


@pytest.fixture
def mock_config_store():
    store = MagicMock()
    store.get = MagicMock(return_value=BotSettings(summary_channel_id=1, monitored_channel_ids=(10, 20)))
    store.add_monitored = AsyncMock(return_value=True)
    store.remove_monitored = AsyncMock(return_value=True)
    store.set_summary_channel = AsyncMock(return_value=True)
    store.update_last_summary_time = AsyncMock(return_value=True)
    return store


@pytest.fixture
def mock_discord_user():
    user = MagicMock()
    user.id = 123456789
    user.name = "testuser"
    user.display_name = "TestUser"
    user.bot = False
    user.mention = "<@123456789>"
    user.guild_permissions.administrator = True
    return user


@pytest.fixture
def mock_discord_guild():
    guild = MagicMock()
    guild.id = 987654321
    guild.name = "TestGuild"
    return guild


@pytest.fixture
def mock_discord_channel():
    return make_text_channel(111222333, "test-channel")


@pytest.fixture
def mock_application_context(mock_discord_user, mock_discord_guild, mock_discord_channel):
    ctx = MagicMock()
    ctx.author = mock_discord_user
    ctx.user = mock_discord_user
    ctx.guild = mock_discord_guild
    ctx.channel = mock_discord_channel
    ctx.respond = AsyncMock()
    ctx.defer = AsyncMock()
    ctx.followup = MagicMock()
    ctx.followup.send = AsyncMock()
    return ctx


@pytest.fixture
def mock_bot(mock_discord_user, mock_config_store):
    bot = MagicMock()
    bot.user = mock_discord_user
    bot.guilds = []
    bot.get_channel = MagicMock(return_value=None)
    bot.fetch_channel = AsyncMock()
    bot.config_store = mock_config_store
    bot.digest_service = MagicMock()
    bot.digest_service.run = AsyncMock()
    bot.digest_service.format_timestamp = MagicMock(return_value="2026-10-19 12:00 UTC")
    bot.channel_provider = MagicMock()
    return bot
