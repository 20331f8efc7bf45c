import re
from decimal import Decimal

import discord

from core.conditions import CONDITION_TOKENS
from core.scanner import TimeWindow
from core.search import PriceReport

RECENT_SALES_LIMIT = 10
TITLE_LIMIT = 70
CURRENCY_SYMBOLS = {"GBP": "£", "USD": "$", "EUR": "€"}


def format_price(amount: Decimal | float, currency: str = "GBP") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{amount:,.2f}"
    return f"{currency} {amount:,.2f}"


def link_text(title: str) -> str:
    """Listing title made safe for the text part of a markdown link."""
    text = discord.utils.escape_markdown(title[:TITLE_LIMIT])
    return re.sub(r"(?<!\\)([\[\]])", r"\\\1", text)


def build_report_embed(
    report: PriceReport, currency: str = "GBP", category: str | None = None
) -> discord.Embed:
    condition = CONDITION_TOKENS.get(report.condition or "")
    title = f"Sold prices: {report.query}"
    if condition:
        title += f" ({condition.value})"

    embed = discord.Embed(title=title[:256], color=discord.Color.red())
    for window in (TimeWindow.WEEK, TimeWindow.MONTH, TimeWindow.YEAR):
        result = report.windows[window]
        embed.add_field(
            name=window.label,
            value=f"{format_price(result.average_price, currency)}\n{result.total_items} items",
            inline=True,
        )
    embed.add_field(
        name="Overall Average",
        value=(
            f"{format_price(report.overall_average, currency)}\n"
            f"Based on {report.total_unique_items} unique items"
        ),
        inline=False,
    )

    lines = []
    for item in report.recent.items[:RECENT_SALES_LIMIT]:
        sold = item.sold_date or "Unknown date"
        lines.append(
            f"[{link_text(item.title)}]({item.link}) - {item.currency} {item.price:.2f} "
            f"| {item.condition.value} | Sold: {sold}"
        )
    if lines:
        embed.add_field(name="Recent Sales", value="\n".join(lines)[:1024], inline=False)

    if category:
        embed.set_footer(text=f"Category: {category}")
    return embed
