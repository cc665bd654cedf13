from __future__ import annotations

from dataclasses import dataclass

ALL = "all"
FALLBACK_COLOR = "#78716c"


@dataclass(frozen=True)
class Category:
    name: str
    color: str


CATEGORIES: tuple[Category, ...] = (
    Category("computer science", "#F37121"),
    Category("games", "#068DA9"),
    Category("entertainment", "#F8DE22"),
    Category("technology", "#C70039"),
    Category("football", "#42032C"),
    Category("cricket", "#38E54D"),
    Category("history", "#3B0000"),
    Category("news", "#8b5cf6"),
)

_BY_NAME = {c.name: c for c in CATEGORIES}


def category_names() -> list[str]:
    return [c.name for c in CATEGORIES]


def get_category(name: str) -> Category | None:
    return _BY_NAME.get(name)


def is_known(name: str) -> bool:
    """True for a registry name or the "all" pseudo-category."""
    return name == ALL or name in _BY_NAME


def color_for(name: str) -> str:
    # Rows from the store may carry a category the registry no longer lists.
    cat = _BY_NAME.get(name)
    return cat.color if cat else FALLBACK_COLOR
