import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bot.categories import category_label
from bot.embeds import build_report_embed, format_price, link_text
from core.aggregate import aggregate, merge
from core.conditions import Condition
from core.parser import ProjectedListing
from core.scanner import TimeWindow
from core.search import PriceReport


def projected(link: str, price: str, sold_date: str | None = "01/06/2024") -> ProjectedListing:
    return ProjectedListing(
        title=f"Apple iPhone 15 {link}",
        price=Decimal(price),
        currency="GBP",
        condition=Condition.USED,
        raw_condition="Used",
        link=f"https://www.ebay.co.uk/itm/{link}",
        sold_date=sold_date,
    )


def make_report() -> PriceReport:
    week = aggregate([projected("a", "600", None)])
    month = aggregate([projected("a", "600", None), projected("b", "700")])
    year = aggregate([])
    overall = merge([week, month, year])
    return PriceReport(
        query="iPhone 15",
        condition="used",
        windows={TimeWindow.WEEK: week, TimeWindow.MONTH: month, TimeWindow.YEAR: year},
        overall_average=overall.average_price,
        total_unique_items=overall.total_items,
    )


class TestFormatting:
    def test_format_price(self):
        assert format_price(Decimal("1234.5")) == "£1,234.50"
        assert format_price(Decimal("0")) == "£0.00"
        assert format_price(Decimal("10"), "CHF") == "CHF 10.00"

    def test_category_label(self):
        assert category_label("phones") == "Electronics / Phones & Smartphones"
        assert category_label(None) is None

    def test_report_embed(self):
        embed = build_report_embed(make_report(), category="Electronics / Phones & Smartphones")
        assert embed.title == "Sold prices: iPhone 15 (Used)"

        fields = {field.name: field.value for field in embed.fields}
        assert fields["Last Week"] == "£600.00\n1 items"
        assert fields["Last Month"] == "£650.00\n2 items"
        assert fields["Last Year"] == "£0.00\n0 items"
        assert fields["Overall Average"] == "£650.00\nBased on 2 unique items"
        assert "Sold: Unknown date" in fields["Recent Sales"]
        assert embed.footer.text == "Category: Electronics / Phones & Smartphones"

    def test_link_text_escapes_brackets_and_markdown(self):
        assert link_text("iPhone [15] ]Pro *mint*") == r"iPhone \[15\] \]Pro \*mint\*"
        assert link_text("x" * 100) == "x" * 70

    def test_recent_sale_title_cannot_break_link(self):
        item = ProjectedListing(
            title="Apple iPhone 15 ]Pro[ 256GB",
            price=Decimal("800"),
            currency="GBP",
            condition=Condition.USED,
            raw_condition="Used",
            link="https://www.ebay.co.uk/itm/c",
            sold_date="02/06/2024",
        )
        week = aggregate([item])
        report = PriceReport(
            query="iPhone 15",
            condition=None,
            windows={TimeWindow.WEEK: week, TimeWindow.MONTH: week, TimeWindow.YEAR: week},
            overall_average=week.average_price,
            total_unique_items=week.total_items,
        )

        fields = {field.name: field.value for field in build_report_embed(report).fields}
        assert fields["Recent Sales"].startswith(
            r"[Apple iPhone 15 \]Pro\[ 256GB](https://www.ebay.co.uk/itm/c) - GBP 800.00"
        )
