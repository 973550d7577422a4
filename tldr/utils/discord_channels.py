"""
py-cord side of a digest run: resolves channel IDs and renders digests as embeds.
"""
import logging

import discord

from ..types import DigestPost
from .constants import DISCORD_EMBED_DESCRIPTION_LIMIT, DISCORD_EMBED_TOTAL_LIMIT, DISCORD_EMBEDS_PER_MESSAGE, EMBED_COLOR

logger = logging.getLogger("tldr.channels")


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def render_embeds(post: DigestPost) -> list[discord.Embed]:
    embeds = []
    for block in post.blocks:
        embed = discord.Embed(
            title=block.title,
            description=truncate(block.body, DISCORD_EMBED_DESCRIPTION_LIMIT),
            color=EMBED_COLOR,
        )
        embed.set_footer(text=block.footer)
        embeds.append(embed)
    return embeds


def batch_embeds(embeds: list[discord.Embed]) -> list[list[discord.Embed]]:
    """Group embeds into messages that respect both the per-message count and total size caps."""
    batches = []
    current, size = [], 0
    for embed in embeds:
        length = len(embed)
        if current and (len(current) >= DISCORD_EMBEDS_PER_MESSAGE or size + length > DISCORD_EMBED_TOTAL_LIMIT):
            batches.append(current)
            current, size = [], 0
        current.append(embed)
        size += length
    if current:
        batches.append(current)
    return batches


class DiscordChannelProvider:
    def __init__(self, bot: discord.Client):
        self.bot = bot

    async def resolve_channel(self, channel_id: int):
        """Cache first, then the API. Returns None if the channel is gone or hidden."""
        channel = self.bot.get_channel(channel_id)
        if channel:
            return channel
        try:
            return await self.bot.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden):
            return None
        except discord.HTTPException as e:
            logger.error(f"Failed to fetch channel {channel_id}: {e}")
            return None

    async def post_digest(self, channel, post: DigestPost) -> None:
        """
        Send the header with the first batch of embeds, then the rest as follow-ups.

        A failure on the first message propagates. Once it is out the digest counts
        as posted, so a failed follow-up is logged and the remaining batches are dropped.
        """
        batches = batch_embeds(render_embeds(post))
        first, rest = (batches[0], batches[1:]) if batches else ([], [])
        await channel.send(content=post.header, embeds=first)

        for index, batch in enumerate(rest, start=2):
            try:
                await channel.send(embeds=batch)
            except discord.HTTPException as e:
                dropped = [embed.title for later in rest[index - 2:] for embed in later]
                logger.error(f"Failed to post digest message {index} of {len(batches)}, dropped {dropped}: {e}")
                return
        logger.info(f"Digest posted to #{getattr(channel, 'name', channel.id)} in {max(len(batches), 1)} message(s)")
