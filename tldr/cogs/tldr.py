import discord
from discord.ext import commands, tasks
from discord.commands import SlashCommandGroup
import logging

from ..services.history import is_text_capable
from ..types import DigestStatus
from ..utils.constants import EMBED_COLOR, HOURLY_RUN_TIMES
from ..utils.permissions import is_guild_admin

logger = logging.getLogger("tldr.cog")

NOW_RESPONSES = {
    DigestStatus.POSTED: "✅ Summary generated and posted to the summary channel.",
    DigestStatus.QUIET: "💤 No new messages in the monitored channels. Nothing to summarize.",
    DigestStatus.BUSY: "⏳ A digest is already being generated! Please wait.",
    DigestStatus.DESTINATION_UNAVAILABLE: "❌ The summary channel could not be found. Use `/tldr config set` to pick another one.",
    DigestStatus.SUMMARIES_FAILED: "❌ Failed to generate a summary. Please check the logs for more information.",
    DigestStatus.POST_FAILED: "❌ The summary could not be posted. Check the bot's permissions in the summary channel.",
}

HELP_ENTRIES = [
    ("/tldr now", "Generate a summary of recent messages immediately."),
    ("/tldr config list", "Show current configuration including monitored channels and summary channel."),
    ("/tldr config add [channel]", "Add a channel to be monitored for summaries."),
    ("/tldr config remove [channel]", "Remove a channel from being monitored."),
    ("/tldr config set [channel]", "Set the channel where summaries will be posted."),
    ("/tldr help", "Show this help message."),
]


class Tldr(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.config_store = bot.config_store
        self.digest_service = bot.digest_service
        self.channel_provider = bot.channel_provider

    def cog_unload(self):
        self.stop_scheduler()

    tldr = SlashCommandGroup("tldr", "TLDR Bot commands")
    config = tldr.create_subgroup("config", "Configure TLDR Bot (Admin only)")

    # --- Digest Commands ---

    @tldr.command(name="now", description="Generate a summary of recent messages right now")
    async def now(self, ctx: discord.ApplicationContext):
        await ctx.defer(ephemeral=True)

        settings = self.config_store.get()
        if not settings.summary_channel_id:
            await ctx.followup.send("❌ No summary channel configured. Use `/tldr config set` to set one.")
            return

        if not settings.monitored_channel_ids:
            await ctx.followup.send("❌ No channels are being monitored. Use `/tldr config add` to add channels.")
            return

        try:
            outcome = await self.digest_service.run(self.channel_provider)
        except Exception as e:
            logger.error(f"Error handling /tldr now: {e}")
            await ctx.followup.send("❌ An error occurred while generating the summary.")
            return

        await ctx.followup.send(NOW_RESPONSES.get(outcome.status, f"❌ {outcome.reason}"))

    @tldr.command(name="help", description="Show help information for TLDR Bot")
    async def show_help(self, ctx: discord.ApplicationContext):
        embed = discord.Embed(
            title="TLDR Bot Help",
            description="TLDR Bot summarizes conversations in your Discord server.",
            color=EMBED_COLOR,
        )
        for name, value in HELP_ENTRIES:
            embed.add_field(name=name, value=value, inline=False)
        embed.set_footer(text="TLDR Bot - Hourly summaries made easy")

        await ctx.respond(embed=embed, ephemeral=True)

    # --- Configuration Commands ---

    async def _reject_non_admin(self, ctx: discord.ApplicationContext) -> bool:
        if is_guild_admin(ctx.author):
            return False
        await ctx.respond("❌ You need administrator permissions to configure TLDR Bot.", ephemeral=True)
        return True

    @config.command(name="list", description="Show the current TLDR Bot configuration")
    @discord.default_permissions(administrator=True)
    async def config_list(self, ctx: discord.ApplicationContext):
        if await self._reject_non_admin(ctx):
            return

        settings = self.config_store.get()
        summary_channel = f"<#{settings.summary_channel_id}>" if settings.summary_channel_id else "Not configured"
        monitored = "\n".join(f"<#{cid}>" for cid in settings.monitored_channel_ids) or "No channels are being monitored"

        embed = discord.Embed(title="TLDR Bot Configuration", color=EMBED_COLOR)
        embed.add_field(name="Summary Channel", value=summary_channel, inline=False)
        embed.add_field(name="Monitored Channels", value=monitored, inline=False)
        if settings.last_summary_time:
            embed.set_footer(text=f"Last summary: {self.digest_service.format_timestamp(settings.last_summary_time)}")

        await ctx.respond(embed=embed, ephemeral=True)

    @config.command(name="add", description="Add a channel to be monitored for summaries")
    @discord.default_permissions(administrator=True)
    async def config_add(
        self,
        ctx: discord.ApplicationContext,
        channel: discord.Option(discord.abc.GuildChannel, "The channel to monitor"),
    ):
        if await self._reject_non_admin(ctx):
            return

        if not is_text_capable(channel):
            await ctx.respond("❌ Only text channels can be monitored.", ephemeral=True)
            return

        if channel.id in self.config_store.get().monitored_channel_ids:
            await ctx.respond(f"❌ {channel.mention} is already being monitored.", ephemeral=True)
            return

        if await self.config_store.add_monitored(channel.id):
            await ctx.respond(f"✅ {channel.mention} has been added to monitored channels.", ephemeral=True)
        else:
            await ctx.respond(f"⚠️ {channel.mention} was added, but the configuration could not be saved.", ephemeral=True)

    @config.command(name="remove", description="Stop monitoring a channel")
    @discord.default_permissions(administrator=True)
    async def config_remove(
        self,
        ctx: discord.ApplicationContext,
        channel: discord.Option(discord.abc.GuildChannel, "The channel to stop monitoring"),
    ):
        if await self._reject_non_admin(ctx):
            return

        if channel.id not in self.config_store.get().monitored_channel_ids:
            await ctx.respond(f"❌ {channel.mention} is not being monitored.", ephemeral=True)
            return

        if await self.config_store.remove_monitored(channel.id):
            await ctx.respond(f"✅ {channel.mention} has been removed from monitored channels.", ephemeral=True)
        else:
            await ctx.respond(f"⚠️ {channel.mention} was removed, but the configuration could not be saved.", ephemeral=True)

    @config.command(name="set", description="Set the channel where summaries will be posted")
    @discord.default_permissions(administrator=True)
    async def config_set(
        self,
        ctx: discord.ApplicationContext,
        channel: discord.Option(discord.abc.GuildChannel, "The channel to post summaries in"),
    ):
        if await self._reject_non_admin(ctx):
            return

        if not is_text_capable(channel):
            await ctx.respond("❌ Only text channels can be set as the summary channel.", ephemeral=True)
            return

        if await self.config_store.set_summary_channel(channel.id):
            await ctx.respond(f"✅ {channel.mention} has been set as the summary channel.", ephemeral=True)
        else:
            await ctx.respond(f"⚠️ {channel.mention} was set, but the configuration could not be saved.", ephemeral=True)

    # --- Scheduler ---

    def start_scheduler(self):
        if not self.hourly_digest.is_running():
            self.hourly_digest.start()
            logger.info("Hourly summary scheduler set up")

    def stop_scheduler(self):
        """Cancel future firings; a run already in progress is left to finish."""
        if self.hourly_digest.is_running():
            self.hourly_digest.stop()
            logger.info("Hourly summary scheduler stopped")

    @tasks.loop(time=HOURLY_RUN_TIMES)
    async def hourly_digest(self):
        await self.run_scheduled_digest()

    @hourly_digest.before_loop
    async def before_hourly_digest(self):
        await self.bot.wait_until_ready()

    async def run_scheduled_digest(self) -> bool:
        """One scheduler firing. Advances the digest window only when the run succeeded."""
        logger.info("Running scheduled summary task")
        try:
            outcome = await self.digest_service.run(self.channel_provider)
            if not outcome.success:
                logger.warning(f"Scheduled summary did not complete: {outcome.reason}")
                return False

            if not await self.config_store.update_last_summary_time(outcome.window_end):
                logger.warning("Summary completed but the last summary time could not be saved")
            logger.info(f"Scheduled summary completed ({outcome.status.value})")
            return True
        except Exception as e:
            logger.error(f"Error in scheduled summary task: {e}")
            return False


def setup(bot: commands.Bot):
    cog = Tldr(bot)
    bot.add_cog(cog)
    cog.start_scheduler()
