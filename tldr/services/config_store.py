"""
JSON-backed store for the bot's runtime configuration.
Holds the digest destination, the monitored channels and the last digest time.
"""
import asyncio
import json
import logging
import os
from datetime import datetime, timezone

import aiofiles
import aiofiles.os

from ..types import BotSettings

logger = logging.getLogger("tldr.config_store")


class ConfigStore:
    """
    Owns the in-memory configuration and its on-disk copy.
    Readers get frozen snapshots; every mutator persists before returning.
    """

    def __init__(self, path: str, default_summary_channel_id: int | None = None,
                 default_monitored_channel_ids: list[int] | None = None):
        self.path = path
        self._defaults = BotSettings(
            summary_channel_id=default_summary_channel_id,
            monitored_channel_ids=tuple(dict.fromkeys(default_monitored_channel_ids or [])),
        )
        self._summary_channel_id = self._defaults.summary_channel_id
        self._monitored: list[int] = list(self._defaults.monitored_channel_ids)
        self._last_summary_time: datetime | None = None
        self._write_lock = asyncio.Lock()

    async def load(self) -> BotSettings:
        """Load from disk, falling back to (and persisting) defaults. Never raises."""
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
            self._apply(json.loads(raw))
            logger.info(f"Configuration loaded from {self.path}")
        except FileNotFoundError:
            logger.info(f"No configuration file at {self.path}, using defaults")
            self._reset()
            await self.save()
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading configuration from {self.path}: {e}")
            self._reset()
            await self.save()
        return self.get()

    def _reset(self):
        self._summary_channel_id = self._defaults.summary_channel_id
        self._monitored = list(self._defaults.monitored_channel_ids)
        self._last_summary_time = None

    def _apply(self, data: dict):
        # Parse everything first so a bad value leaves the current state untouched.
        summary_id = data.get("summaryChannelId", self._defaults.summary_channel_id)
        summary_id = int(summary_id) if summary_id is not None else None

        monitored = data.get("monitoredChannelIds", list(self._defaults.monitored_channel_ids))
        if not isinstance(monitored, list):
            raise TypeError("monitoredChannelIds must be a list")
        monitored = list(dict.fromkeys(int(i) for i in monitored))

        last = data.get("lastSummaryTime")
        last = _parse_timestamp(last) if last else None

        self._summary_channel_id = summary_id
        self._monitored = monitored
        self._last_summary_time = last

    def get(self) -> BotSettings:
        return BotSettings(
            summary_channel_id=self._summary_channel_id,
            monitored_channel_ids=tuple(self._monitored),
            last_summary_time=self._last_summary_time,
        )

    def to_dict(self) -> dict:
        return {
            "summaryChannelId": str(self._summary_channel_id) if self._summary_channel_id is not None else None,
            "monitoredChannelIds": [str(i) for i in self._monitored],
            "lastSummaryTime": self._last_summary_time.isoformat() if self._last_summary_time else None,
        }

    async def save(self) -> bool:
        """Write the current state to disk. Returns False if the write failed."""
        payload = json.dumps(self.to_dict(), indent=2)
        tmp_path = f"{self.path}.tmp"
        async with self._write_lock:
            try:
                directory = os.path.dirname(self.path)
                if directory:
                    await aiofiles.os.makedirs(directory, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(payload)
                await aiofiles.os.replace(tmp_path, self.path)
            except OSError as e:
                logger.error(f"Error saving configuration to {self.path}: {e}")
                return False
        logger.debug(f"Configuration saved to {self.path}")
        return True

    # --- Mutators ---
    # In-memory state changes even when the write fails; callers get the write result.

    async def add_monitored(self, channel_id: int) -> bool:
        if channel_id in self._monitored:
            return True
        self._monitored.append(channel_id)
        return await self.save()

    async def remove_monitored(self, channel_id: int) -> bool:
        self._monitored = [i for i in self._monitored if i != channel_id]
        return await self.save()

    async def set_summary_channel(self, channel_id: int) -> bool:
        self._summary_channel_id = channel_id
        return await self.save()

    async def update_last_summary_time(self, time: datetime | None = None) -> bool:
        time = time or datetime.now(timezone.utc)
        if time.tzinfo is None:
            time = time.replace(tzinfo=timezone.utc)
        self._last_summary_time = time.astimezone(timezone.utc)
        return await self.save()


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
