import discord
import logging
from pathlib import Path
from zoneinfo import ZoneInfo
from discord.ext import commands
from .config import config
from .services.ai import AIService
from .services.config_store import ConfigStore
from .services.digest_service import DigestService
from .services.history import HistoryFetcher
from .services.keepalive import KeepAliveServer
from .utils.discord_channels import DiscordChannelProvider

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("tldr.bot")

COGS_DIR = Path(__file__).parent / "cogs"


class TldrBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            debug_guilds=config.DEBUG_GUILD_IDS or None
        )

        display_tz = ZoneInfo(config.DISPLAY_TIMEZONE)
        self.config_store = ConfigStore(
            config.CONFIG_PATH,
            default_summary_channel_id=config.SUMMARY_CHANNEL_ID,
            default_monitored_channel_ids=config.MONITORED_CHANNEL_IDS,
        )
        self.ai_service = AIService(
            api_key=config.OPENROUTER_API_KEY,
            model=config.OPENROUTER_MODEL,
            base_url=config.OPENROUTER_BASE_URL,
            max_tokens=config.SUMMARY_MAX_TOKENS,
            temperature=config.SUMMARY_TEMPERATURE,
        )
        self.digest_service = DigestService(self.config_store, self.ai_service, HistoryFetcher(), display_tz)
        self.channel_provider = DiscordChannelProvider(self)
        self.keepalive = KeepAliveServer(config.PORT)
        self._initialized = False

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guilds")

        # on_ready fires again after reconnects
        if self._initialized:
            return
        self._initialized = True

        await self.config_store.load()

        try:
            await self.keepalive.start()
        except OSError as e:
            logger.error(f"Failed to start keep-alive server: {e}")

        self.load_extensions_from_dir()

        try:
            await self.sync_commands()
            logger.info("Synced commands successfully")
        except Exception as e:
            logger.error(f"Failed to sync commands: {e}")

    def load_extensions_from_dir(self):
        for path in sorted(COGS_DIR.glob("*.py")):
            if path.name.startswith("_"):
                continue
            try:
                self.load_extension(f"{__package__}.cogs.{path.stem}")
                logger.info(f"Loaded extension: {path.name}")
            except Exception as e:
                logger.error(f"Failed to load extension {path.name}: {e}")

    async def on_application_command_error(self, ctx: discord.ApplicationContext, error: discord.DiscordException):
        logger.error(f"Command error in /{ctx.command.qualified_name if ctx.command else 'unknown'}: {error}")
        try:
            await ctx.respond("An error occurred while processing your command.", ephemeral=True)
        except discord.HTTPException:
            pass

    async def on_error(self, event_method: str, *args, **kwargs):
        logger.exception(f"Unhandled error in {event_method}")

    async def close(self):
        cog = self.get_cog("Tldr")
        if cog:
            cog.stop_scheduler()
        await self.keepalive.stop()
        await super().close()
