import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands

from bot.categories import CATEGORY_CHOICES, CONDITION_CHOICES, category_label
from bot.embeds import build_report_embed
from config import settings
from core.scanner import EbayAPIError
from core.search import price_search

if TYPE_CHECKING:
    from bot.main import SoldPriceBot

log = logging.getLogger(__name__)


async def send_price_report(
    interaction: discord.Interaction,
    query: str,
    condition: str | None = None,
    category: str | None = None,
) -> None:
    try:
        report = await price_search.run(query, condition, key=interaction.user.id)
    except EbayAPIError as e:
        log.error(f"Price search failed for {query!r}: {e} ({e.details})")
        await interaction.followup.send(f"Error: {e}\n{e.details or ''}".strip())
        return

    if report is None:
        await interaction.followup.send(
            f"Search for `{query}` was replaced by your newer search", ephemeral=True
        )
        return

    embed = build_report_embed(
        report, currency=settings.fallback_currency, category=category_label(category)
    )
    await interaction.followup.send(embed=embed)


@app_commands.guild_install()
@app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
class PriceCommands(app_commands.Group):
    def __init__(self, bot: "SoldPriceBot"):
        super().__init__(name="price", description="Look up typical sold prices on eBay")
        self.bot = bot

    @app_commands.command(name="search", description="Average sold price for a product")
    @app_commands.describe(
        query="Product name",
        condition="Only count listings in this condition",
        category="Product category",
    )
    @app_commands.choices(condition=CONDITION_CHOICES, category=CATEGORY_CHOICES)
    async def search(
        self,
        interaction: discord.Interaction,
        query: str,
        condition: app_commands.Choice[str] | None = None,
        category: app_commands.Choice[str] | None = None,
    ) -> None:
        await interaction.response.defer()

        if not query.strip():
            await interaction.followup.send("Please enter a product name to search")
            return

        await send_price_report(
            interaction,
            query,
            condition.value if condition else None,
            category.value if category else None,
        )
