"""Immutable filter specifications accepted by the NFT list query."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


def _normalize(values: Iterable[str] | None, field_name: str) -> tuple[str, ...] | None:
    """Return a sorted, de-duplicated tuple, or ``None`` when nothing was given."""

    if values is None:
        return None
    if isinstance(values, (str, bytes)):
        raise TypeError(f"{field_name} must be a collection of strings, not a single string")
    normalized = tuple(sorted(set(values)))
    return normalized or None


@dataclass(slots=True, frozen=True)
class AttributeFilter:
    """Match NFTs carrying ``trait_type`` with any one of ``values``."""

    trait_type: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _normalize(self.values, "values") or ())


@dataclass(slots=True, frozen=True)
class FilterSpec:
    """Optional predicates narrowing an NFT page.

    ``None`` (or an empty collection) imposes no constraint; present
    categories narrow the result conjunctively. Collections are stored as
    sorted tuples so that equal filters compare and hash equal.
    """

    addresses: tuple[str, ...] | None = None
    owners: tuple[str, ...] | None = None
    update_authorities: tuple[str, ...] | None = None
    creators: tuple[str, ...] | None = None
    auction_houses: tuple[str, ...] | None = None
    offerers: tuple[str, ...] | None = None
    attributes: tuple[AttributeFilter, ...] | None = None
    listed: bool | None = None
    with_offers: bool = False
    collections: tuple[str, ...] | None = None
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        for name in (
            "addresses",
            "owners",
            "update_authorities",
            "creators",
            "auction_houses",
            "offerers",
            "collections",
        ):
            object.__setattr__(self, name, _normalize(getattr(self, name), name))
        object.__setattr__(self, "attributes", _merge_attributes(self.attributes))

        if self.limit is not None and (isinstance(self.limit, bool) or self.limit < 0):
            raise ValueError("limit must be a non-negative integer")
        if isinstance(self.offset, bool) or self.offset < 0:
            raise ValueError("offset must be a non-negative integer")

    @property
    def filters_offers(self) -> bool:
        return self.with_offers or self.offerers is not None


def _merge_attributes(
    filters: Iterable[AttributeFilter] | None,
) -> tuple[AttributeFilter, ...] | None:
    if filters is None:
        return None

    merged: dict[str, set[str]] = {}
    for item in filters:
        if not item.values:
            continue
        merged.setdefault(item.trait_type, set()).update(item.values)

    if not merged:
        return None
    return tuple(
        AttributeFilter(trait_type=trait_type, values=tuple(values))
        for trait_type, values in sorted(merged.items())
    )


__all__ = ["AttributeFilter", "FilterSpec"]
