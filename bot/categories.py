from discord import app_commands

# Main category -> subcategory id -> display name
CATEGORIES: dict[str, dict[str, str]] = {
    "Electronics": {
        "phones": "Phones & Smartphones",
        "laptops": "Laptops & Computers",
        "cameras": "Cameras & Photography",
        "gaming": "Gaming Consoles",
        "tablets": "Tablets & E-Readers",
        "audio": "Audio Equipment",
    },
    "Tools": {
        "power_tools": "Power Tools",
        "hand_tools": "Hand Tools",
        "garden_tools": "Garden Tools",
        "measuring": "Measuring & Layout",
        "workshop": "Workshop Equipment",
    },
    "Bikes": {
        "electric_bikes": "Electric Bikes",
        "mountain_bikes": "Mountain Bikes",
        "road_bikes": "Road Bikes",
        "hybrid_bikes": "Hybrid Bikes",
        "bike_parts": "Bike Parts",
    },
}

CATEGORY_CHOICES = [
    app_commands.Choice(name=f"{main} / {name}", value=sub_id)
    for main, subcategories in CATEGORIES.items()
    for sub_id, name in subcategories.items()
]

CONDITION_CHOICES = [
    app_commands.Choice(name="New", value="new"),
    app_commands.Choice(name="Open Box", value="openBox"),
    app_commands.Choice(name="Refurbished", value="refurbished"),
    app_commands.Choice(name="Used", value="used"),
]


def category_label(sub_id: str | None) -> str | None:
    if not sub_id:
        return None
    for main, subcategories in CATEGORIES.items():
        if sub_id in subcategories:
            return f"{main} / {subcategories[sub_id]}"
    return sub_id
