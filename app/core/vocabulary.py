"""Controlled tag vocabularies for submission classification."""

from __future__ import annotations

from typing import Iterable

TAG_CATEGORIES: dict[str, tuple[str, ...]] = {
    "material": ("Alloy", "Wood", "Plastic", "Glass", "Fabric", "Composite"),
    "color": ("Red", "Blue", "Green", "Black", "White", "Yellow"),
    "function": (
        "Organization & Storage",
        "Life Improvement & Decor",
        "Health & Wellness",
        "Innovative Gadgets & Tools",
        "Accessibility & Mobility Solutions",
    ),
}


def is_known_tag(category: str, value: str) -> bool:
    return value in TAG_CATEGORIES.get(category, ())


def unknown_tags(category: str, values: Iterable[str]) -> list[str]:
    """Return the values that are not part of ``category``'s vocabulary."""
    if category not in TAG_CATEGORIES:
        raise KeyError(category)
    allowed = TAG_CATEGORIES[category]
    return [value for value in values if value not in allowed]


__all__ = ["TAG_CATEGORIES", "is_known_tag", "unknown_tags"]
