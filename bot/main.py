import asyncio
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import discord
from discord import app_commands

from bot.commands.price import PriceCommands
from bot.commands.saved import SavedCommands
from config import settings
from core.scanner import ebay_client
from db.store import store

log_dir = Path("./logs")
log_dir.mkdir(exist_ok=True)

log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
log_level = getattr(logging, settings.log_level)

logging.basicConfig(level=log_level, format=log_format)

file_handler = RotatingFileHandler(
    log_dir / "sold-price.log",
    maxBytes=10 * 1024 * 1024,
    backupCount=5,
    encoding="utf-8",
)
file_handler.setFormatter(logging.Formatter(log_format))
file_handler.setLevel(log_level)
logging.getLogger().addHandler(file_handler)

log = logging.getLogger(__name__)


class SoldPriceBot(discord.Client):
    def __init__(self):
        intents = discord.Intents.default()
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        await store.connect()
        log.info("Database connected")

        self.tree.add_command(PriceCommands(self))
        self.tree.add_command(SavedCommands(self))

        await self.tree.sync()
        log.info("Commands synced")

    async def on_ready(self) -> None:
        log.info(f"Logged in as {self.user}")

    async def close(self) -> None:
        await ebay_client.close()
        await store.close()
        await super().close()


async def main() -> None:
    if not settings.discord_bot_token:
        raise SystemExit("DISCORD_BOT_TOKEN is not set")
    bot = SoldPriceBot()
    async with bot:
        await bot.start(settings.discord_bot_token)


if __name__ == "__main__":
    asyncio.run(main())
