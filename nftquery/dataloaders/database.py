"""Relational batchers, one per relation kind."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy.engine import Engine

from nftquery.domain import (
    FilterSpec,
    Nft,
    NftActivity,
    NftAttribute,
    NftCreator,
    NftListing,
    NftOffer,
    NftOwner,
    NftPurchase,
)
from nftquery.repositories import NftRepository

from .batcher import DatabaseBatcher, OneToManyBatcher, OneToOneBatcher


class NftBatcher(OneToOneBatcher[str, Nft]):
    name = "nft"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, Nft]]:
        return ((nft.address, nft) for nft in repo.get_nfts(keys))


class NftOwnerBatcher(OneToOneBatcher[str, NftOwner]):
    name = "nft owner"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftOwner]]:
        return repo.owners(keys)


class ListingReceiptsBatcher(OneToManyBatcher[str, NftListing]):
    name = "listing receipts"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftListing]]:
        return repo.listings(keys)


class BidReceiptsBatcher(OneToManyBatcher[str, NftOffer]):
    name = "bid receipts"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftOffer]]:
        return repo.offers(keys)


class PurchaseReceiptsBatcher(OneToManyBatcher[str, NftPurchase]):
    name = "purchase receipts"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftPurchase]]:
        return repo.purchases(keys)


class NftAttributesBatcher(OneToManyBatcher[str, NftAttribute]):
    name = "nft attributes"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftAttribute]]:
        return repo.attributes(keys)


class NftCreatorsBatcher(OneToManyBatcher[str, NftCreator]):
    name = "nft creators"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftCreator]]:
        return repo.creators(keys)


class NftActivitiesBatcher(OneToManyBatcher[str, NftActivity]):
    name = "nft activities"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, NftActivity]]:
        return ((activity.metadata, activity) for activity in repo.activities(keys))


class TwitterHandleBatcher(OneToOneBatcher[str, str]):
    name = "twitter handle"

    def fetch(self, repo: NftRepository, keys: Sequence[str]) -> Iterable[tuple[str, str]]:
        return repo.twitter_handles(keys)


class NftPageBatcher(DatabaseBatcher[FilterSpec, list[Nft]]):
    """Run the compiled list query for each distinct filter in the batch.

    All statements of one batch share a single pooled connection. Specs
    without a ``limit`` are capped at ``default_page_size``.
    """

    name = "nft page"

    def __init__(self, engine: Engine, *, default_page_size: int | None = None) -> None:
        super().__init__(engine)
        self._default_page_size = default_page_size

    def fetch(
        self, repo: NftRepository, keys: Sequence[FilterSpec]
    ) -> Iterable[tuple[FilterSpec, list[Nft]]]:
        return [
            (spec, repo.list_nfts(spec, default_limit=self._default_page_size)) for spec in keys
        ]

    def collect(
        self, keys: Sequence[FilterSpec], pairs: Iterable[tuple[FilterSpec, Any]]
    ) -> dict[FilterSpec, list[Nft]]:
        return dict(pairs)

    def missing(self, key: FilterSpec) -> list[Nft]:
        return []


__all__ = [
    "BidReceiptsBatcher",
    "ListingReceiptsBatcher",
    "NftActivitiesBatcher",
    "NftAttributesBatcher",
    "NftBatcher",
    "NftCreatorsBatcher",
    "NftOwnerBatcher",
    "NftPageBatcher",
    "PurchaseReceiptsBatcher",
    "TwitterHandleBatcher",
]
