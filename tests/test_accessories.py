import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from core.accessories import (
    ExclusionPolicy,
    SearchCategory,
    exclude_accessories,
    infer_category,
)
from core.scanner import RawListing


def raw(title: str | None, price: str | None = "300.00") -> RawListing:
    return RawListing(
        item_id=None,
        title=title,
        price=price,
        currency="GBP",
        condition="Used",
        end_date=None,
        link=f"https://www.ebay.co.uk/itm/{title}",
    )


def titles(listings: list[RawListing]) -> list[str | None]:
    return [item.title for item in listings]


class TestInferCategory:
    @pytest.mark.parametrize("query", ["iPhone 15", "Samsung S22", "Google Pixel 8", "smartphone"])
    def test_phone(self, query):
        assert infer_category(query) == SearchCategory.PHONE

    @pytest.mark.parametrize("query", ["MacBook Air M2", "iPad mini", "Sony camera", "Xbox Series X"])
    def test_electronics(self, query):
        assert infer_category(query) == SearchCategory.ELECTRONICS

    @pytest.mark.parametrize("query", ["Makita drill", "Brompton bike", "", None])
    def test_other(self, query):
        assert infer_category(query) == SearchCategory.OTHER

    @pytest.mark.parametrize(
        "query", ["Sony headphones", "Blue Yeti microphone", "Shure earphones", "saxophone"]
    )
    def test_phone_inside_word_is_not_phone(self, query):
        assert infer_category(query) == SearchCategory.OTHER

    @pytest.mark.parametrize("query", ["phone case", "Nokia phones", "iphone15"])
    def test_phone_word_boundaries(self, query):
        assert infer_category(query) == SearchCategory.PHONE



class TestPhoneCategory:
    def test_case_excluded(self):
        listings = [raw("Apple iPhone 15 128GB Blue", "650.00"), raw("iPhone 15 Pro Max Case", "9.99")]
        assert titles(exclude_accessories(listings, "iPhone 15")) == ["Apple iPhone 15 128GB Blue"]

    def test_low_price_screen_protector_excluded(self):
        listings = [
            raw("Samsung Galaxy S22 screen protector tempered glass", "5.99"),
            raw("Samsung Galaxy S22 128GB Unlocked", "350.00"),
        ]
        assert titles(exclude_accessories(listings, "Samsung S22")) == [
            "Samsung Galaxy S22 128GB Unlocked"
        ]

    def test_price_floor_alone_excludes(self):
        listings = [raw("Samsung Galaxy S22 128GB", "12.00")]
        assert exclude_accessories(listings, "Samsung S22") == []

    def test_price_floor_is_configurable(self):
        listings = [raw("Samsung Galaxy S22 128GB", "12.00")]
        policy = ExclusionPolicy(min_phone_price=Decimal("10"))
        assert exclude_accessories(listings, "Samsung S22", policy) == listings

    @pytest.mark.parametrize(
        "title",
        [
            "iPhone 15 USB-C charger",
            "iPhone 15 replacement battery",
            "iPhone 15 bluetooth headphones",
            "iPhone 15 car mount holder",
        ],
    )
    def test_accessory_terms(self, title):
        assert exclude_accessories([raw(title)], "iPhone 15") == []

    def test_screen_part_without_phone_word(self):
        listings = [raw("Galaxy S22 OLED display assembly", "80.00")]
        assert exclude_accessories(listings, "Samsung S22") == []

    def test_screen_with_phone_word_kept(self):
        listings = [raw("Samsung Galaxy S22 smartphone cracked display", "120.00")]
        assert exclude_accessories(listings, "Samsung S22") == listings

    def test_unreadable_price_is_inconclusive(self):
        listings = [raw("Apple iPhone 15 256GB", None)]
        assert exclude_accessories(listings, "iPhone 15") == listings
        strict = ExclusionPolicy(conservative_include=False)
        assert exclude_accessories(listings, "iPhone 15", strict) == []

    def test_accessory_search_keeps_accessories(self):
        listings = [raw("Apple iPhone 15 silicone case", "12.00")]
        assert exclude_accessories(listings, "iPhone 15 case") == listings


class TestElectronicsCategory:
    def test_common_and_audio_excluded(self):
        listings = [
            raw("MacBook Air M2 13 inch"),
            raw("MacBook Air M2 sleeve case"),
            raw("MacBook Air speaker repair"),
        ]
        assert titles(exclude_accessories(listings, "MacBook Air M2")) == ["MacBook Air M2 13 inch"]

    def test_electronics_only_terms_not_applied(self):
        listings = [raw("MacBook Air M2 with charger", "500.00")]
        assert exclude_accessories(listings, "MacBook Air M2") == listings

    def test_no_price_floor(self):
        listings = [raw("iPad mini 2 16GB", "20.00")]
        assert exclude_accessories(listings, "iPad mini") == listings

    def test_query_term_guard(self):
        listings = [raw("iPad mini leather case"), raw("iPad mini smart cover")]
        assert titles(exclude_accessories(listings, "iPad mini case")) == ["iPad mini leather case"]


class TestOtherCategory:
    def test_microphone_search_not_treated_as_phone(self):
        listings = [raw("Blue Yeti USB Microphone with stand", "60.00")]
        assert exclude_accessories(listings, "blue yeti microphone") == listings

    def test_common_terms_excluded(self):
        listings = [raw("Makita DHP482 drill"), raw("Makita drill carry case")]
        assert titles(exclude_accessories(listings, "Makita drill")) == ["Makita DHP482 drill"]

    def test_audio_terms_not_applied(self):
        listings = [raw("Brompton bike with speaker mount")]
        assert exclude_accessories(listings, "Brompton bike") == listings

    def test_query_term_guard(self):
        listings = [raw("Stanley tool case"), raw("Stanley tool box cover")]
        assert titles(exclude_accessories(listings, "tool case")) == ["Stanley tool case"]

    def test_low_price_kept(self):
        listings = [raw("Makita drill", "5.00")]
        assert exclude_accessories(listings, "Makita drill") == listings


class TestInvariants:
    def setup_method(self):
        self.listings = [
            raw("Apple iPhone 15 128GB", "600.00"),
            raw(None),
            raw("iPhone 15 case", "8.00"),
            raw("Apple iPhone 15 Pro 256GB", "800.00"),
            raw("iPhone 15 cheap", "3.00"),
        ]

    def test_untitled_kept(self):
        assert raw(None) in exclude_accessories([raw(None)], "iPhone 15")

    def test_idempotent(self):
        once = exclude_accessories(self.listings, "iPhone 15")
        assert exclude_accessories(once, "iPhone 15") == once

    def test_order_preserved(self):
        kept = exclude_accessories(self.listings, "iPhone 15")
        positions = [self.listings.index(item) for item in kept]
        assert positions == sorted(positions)
        assert titles(kept) == [
            "Apple iPhone 15 128GB",
            None,
            "Apple iPhone 15 Pro 256GB",
        ]
