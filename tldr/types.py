"""
Shared type definitions for the TLDR bot.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class BotSettings:
    """Read-only snapshot of the persisted bot configuration."""
    summary_channel_id: int | None = None
    monitored_channel_ids: tuple[int, ...] = ()
    last_summary_time: datetime | None = None


@dataclass
class ChatLogEntry:
    """A single fetched chat message, stripped down to what a digest needs."""
    authored_at: datetime
    author_name: str
    author_is_bot: bool
    body: str


@dataclass
class ChannelDigestInput:
    """Messages collected from one monitored channel (oldest first)."""
    channel_id: int
    channel_name: str
    messages: list[ChatLogEntry] = field(default_factory=list)


@dataclass
class ChannelSummary:
    channel_name: str
    summary: str
    message_count: int


@dataclass
class DigestResult:
    summaries: list[ChannelSummary]
    total_messages: int
    generated_at: datetime


@dataclass
class DigestBlock:
    """One rendered section of a digest post."""
    title: str
    body: str
    footer: str


@dataclass
class DigestPost:
    """Platform-neutral digest message: a header line plus one block per channel."""
    header: str
    blocks: list[DigestBlock]


class DigestStatus(Enum):
    POSTED = "posted"
    QUIET = "quiet"
    NOT_CONFIGURED = "not_configured"
    DESTINATION_UNAVAILABLE = "destination_unavailable"
    SUMMARIES_FAILED = "summaries_failed"
    POST_FAILED = "post_failed"
    BUSY = "busy"


@dataclass
class DigestOutcome:
    """Outcome of one digest run."""
    status: DigestStatus
    reason: str
    result: DigestResult | None = None
    window_end: datetime | None = None

    @property
    def success(self) -> bool:
        # A quiet run is not a failure.
        return self.status in (DigestStatus.POSTED, DigestStatus.QUIET)
