"""Exclude well-known chain coffee brands from Yelp results."""

from typing import Iterable, TypeVar

# Large chains (and chain stores that happen to sell coffee) we never list
CHAIN_NAMES = (
    "starbucks",
    "starbucks coffee",
    "7brew",
    "7-eleven",
    "dunkin",
    "dunkin donuts",
    "dunkin' donuts",
    "peets coffee",
    "peet's coffee",
    "caribou coffee",
    "tim hortons",
    "the coffee bean",
    "coffee bean & tea leaf",
    "tully's coffee",
    "tullys coffee",
    "biggby coffee",
    "panera bread",  # some locations have cafes
    "mcdonalds",  # McCafe
    "wawa",
    "circle k",
    "speedway",
)

T = TypeVar("T")


def is_chain(business_name: str) -> bool:
    """
    True if the name matches a chain brand.

    Case- and surrounding-whitespace-insensitive; matches when the name contains a
    brand string or a brand string contains the name. This is deliberately loose:
    "Dunkin Express" and "Coffee" ("the coffee bean" contains it) both match.
    """
    normalized = business_name.lower().strip()
    for chain in CHAIN_NAMES:
        if chain in normalized or normalized in chain:
            return True
    return False


def filter_chains(businesses: Iterable[T]) -> list[T]:
    """Return the businesses whose .name is not a chain, preserving order."""
    return [b for b in businesses if not is_chain(b.name)]
