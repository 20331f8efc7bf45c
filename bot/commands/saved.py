from typing import TYPE_CHECKING

import discord
from discord import app_commands

from bot.categories import CATEGORY_CHOICES, CONDITION_CHOICES, category_label
from bot.commands.price import send_price_report
from db.store import store

if TYPE_CHECKING:
    from bot.main import SoldPriceBot


@app_commands.guild_install()
@app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
class SavedCommands(app_commands.Group):
    def __init__(self, bot: "SoldPriceBot"):
        super().__init__(name="saved", description="Manage saved searches")
        self.bot = bot

    @app_commands.command(name="add", description="Save a search")
    @app_commands.describe(query="Product name", condition="Condition", category="Category")
    @app_commands.choices(condition=CONDITION_CHOICES, category=CATEGORY_CHOICES)
    async def add(
        self,
        interaction: discord.Interaction,
        query: str,
        condition: app_commands.Choice[str] | None = None,
        category: app_commands.Choice[str] | None = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True)

        query = query.strip()
        if not query:
            await interaction.followup.send("Please enter a product name to save")
            return

        search = await store.save_search(
            query,
            category=category.value if category else None,
            condition=condition.value if condition else None,
        )
        await interaction.followup.send(f"Search #{search.id} saved: `{search.query}`")

    @app_commands.command(name="list", description="List saved searches")
    async def list_searches(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)

        searches = await store.list_searches()
        if not searches:
            await interaction.followup.send("No saved searches")
            return

        lines = []
        for s in searches:
            parts = [f"#{s.id} `{s.query}`"]
            if s.condition:
                parts.append(f"[{s.condition}]")
            label = category_label(s.category)
            if label:
                parts.append(f"({label})")
            parts.append(s.saved_at.strftime("%d/%m/%Y"))
            line = " ".join(parts)
            if s.note:
                line += f"\n    {s.note}"
            lines.append(line)

        await interaction.followup.send("\n".join(lines))

    @app_commands.command(name="remove", description="Remove a saved search")
    @app_commands.describe(search_id="Saved search ID")
    async def remove(self, interaction: discord.Interaction, search_id: int) -> None:
        await interaction.response.defer(ephemeral=True)

        success = await store.delete_search(search_id)
        if not success:
            await interaction.followup.send(f"Saved search #{search_id} not found")
            return
        await interaction.followup.send(f"Saved search #{search_id} removed")

    @app_commands.command(name="note", description="Attach a note to a saved search")
    @app_commands.describe(search_id="Saved search ID", note="Note text (empty to clear)")
    async def note(self, interaction: discord.Interaction, search_id: int, note: str = "") -> None:
        await interaction.response.defer(ephemeral=True)

        success = await store.set_note(search_id, note.strip())
        if not success:
            await interaction.followup.send(f"Saved search #{search_id} not found")
            return
        await interaction.followup.send(f"Note updated for #{search_id}")

    @app_commands.command(name="run", description="Run a saved search")
    @app_commands.describe(search_id="Saved search ID")
    async def run(self, interaction: discord.Interaction, search_id: int) -> None:
        await interaction.response.defer()

        search = await store.get_search(search_id)
        if not search:
            await interaction.followup.send(f"Saved search #{search_id} not found")
            return

        await send_price_report(interaction, search.query, search.condition, search.category)
