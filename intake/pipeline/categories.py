from enum import Enum


class ItemCategory(str, Enum):
    """Known item kinds. Anything unrecognised is treated as OTHER."""

    DISH = "dish"
    COCKTAIL = "cocktail"
    DRINK = "drink"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "ItemCategory":
        normalized = (value or "").strip().lower()
        for category in cls:
            if category.value == normalized:
                return category
        return cls.OTHER

    @property
    def table(self) -> str:
        return ITEM_TABLES[self]

    @property
    def lists_ingredients(self) -> bool:
        """Beverages describe ingredients; everything else a free-text category."""
        return self in (ItemCategory.COCKTAIL, ItemCategory.DRINK)


DEFAULT_ITEM_TABLE = "dishes"

ITEM_TABLES: dict[ItemCategory, str] = {
    ItemCategory.DISH: "dishes",
    ItemCategory.COCKTAIL: "cocktails",
    ItemCategory.DRINK: "drinks",
    ItemCategory.OTHER: DEFAULT_ITEM_TABLE,
}

SUBMISSIONS_TABLE = "customer_submissions"
