"""NFT-focused data access helpers."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.engine import Connection

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
from nftquery.models import (
    Attribute,
    BidReceipt,
    CurrentMetadataOwner,
    ListingReceipt,
    Metadata,
    MetadataCreator,
    PurchaseReceipt,
    TwitterHandle,
)

from .activity_queries import load_activities
from .nft_queries import list_nfts, nfts_by_address


class NftRepository:
    """Encapsulate every read the query core performs against one connection.

    Relation lookups take a batch of metadata addresses and return
    ``(key, record)`` pairs; callers group them back onto their keys.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    # ------------------------------------------------------------------
    # Pages

    def list_nfts(self, spec: FilterSpec, *, default_limit: int | None = None) -> list[Nft]:
        return list_nfts(self._connection, spec, default_limit=default_limit)

    def get_nfts(self, addresses: Sequence[str]) -> list[Nft]:
        return nfts_by_address(self._connection, addresses)

    def activities(self, addresses: Sequence[str]) -> list[NftActivity]:
        return load_activities(self._connection, addresses)

    # ------------------------------------------------------------------
    # Relations keyed by metadata address

    def owners(self, addresses: Sequence[str]) -> list[tuple[str, NftOwner]]:
        query = (
            select(
                Metadata.address,
                CurrentMetadataOwner.owner_address,
                CurrentMetadataOwner.token_account_address,
            )
            .join(
                CurrentMetadataOwner,
                CurrentMetadataOwner.mint_address == Metadata.mint_address,
            )
            .where(Metadata.address.in_(addresses))
        )
        return [
            (
                row.address,
                NftOwner(
                    address=row.owner_address,
                    associated_token_account_address=row.token_account_address,
                ),
            )
            for row in self._connection.execute(query)
        ]

    def listings(self, addresses: Sequence[str]) -> list[tuple[str, NftListing]]:
        query = (
            select(ListingReceipt.__table__)
            .where(ListingReceipt.metadata_address.in_(addresses))
            .order_by(ListingReceipt.created_at.desc(), ListingReceipt.address.asc())
        )
        return [
            (
                row.metadata,
                NftListing(
                    address=row.address,
                    trade_state=row.trade_state,
                    auction_house=row.auction_house,
                    seller=row.seller,
                    metadata=row.metadata,
                    price=row.price,
                    token_size=row.token_size,
                    created_at=row.created_at,
                    purchase_receipt=row.purchase_receipt,
                    canceled_at=row.canceled_at,
                ),
            )
            for row in self._connection.execute(query)
        ]

    def offers(self, addresses: Sequence[str]) -> list[tuple[str, NftOffer]]:
        query = (
            select(BidReceipt.__table__)
            .where(BidReceipt.metadata_address.in_(addresses))
            .order_by(BidReceipt.price.desc(), BidReceipt.address.asc())
        )
        return [
            (
                row.metadata,
                NftOffer(
                    address=row.address,
                    trade_state=row.trade_state,
                    auction_house=row.auction_house,
                    buyer=row.buyer,
                    metadata=row.metadata,
                    price=row.price,
                    token_size=row.token_size,
                    created_at=row.created_at,
                    purchase_receipt=row.purchase_receipt,
                    canceled_at=row.canceled_at,
                ),
            )
            for row in self._connection.execute(query)
        ]

    def purchases(self, addresses: Sequence[str]) -> list[tuple[str, NftPurchase]]:
        query = (
            select(PurchaseReceipt.__table__)
            .where(PurchaseReceipt.metadata_address.in_(addresses))
            .order_by(PurchaseReceipt.created_at.desc(), PurchaseReceipt.address.asc())
        )
        return [
            (
                row.metadata,
                NftPurchase(
                    address=row.address,
                    auction_house=row.auction_house,
                    buyer=row.buyer,
                    seller=row.seller,
                    metadata=row.metadata,
                    price=row.price,
                    token_size=row.token_size,
                    created_at=row.created_at,
                ),
            )
            for row in self._connection.execute(query)
        ]

    def attributes(self, addresses: Sequence[str]) -> list[tuple[str, NftAttribute]]:
        query = (
            select(Attribute.metadata_address, Attribute.trait_type, Attribute.value)
            .where(Attribute.metadata_address.in_(addresses))
            .order_by(Attribute.id.asc())
        )
        return [
            (
                row.metadata_address,
                NftAttribute(
                    metadata_address=row.metadata_address,
                    trait_type=row.trait_type,
                    value=row.value,
                ),
            )
            for row in self._connection.execute(query)
        ]

    def creators(self, addresses: Sequence[str]) -> list[tuple[str, NftCreator]]:
        query = (
            select(MetadataCreator.__table__)
            .where(MetadataCreator.metadata_address.in_(addresses))
            .order_by(
                MetadataCreator.position.asc().nulls_last(),
                MetadataCreator.creator_address.asc(),
            )
        )
        return [
            (
                row.metadata_address,
                NftCreator(
                    metadata_address=row.metadata_address,
                    address=row.creator_address,
                    share=row.share,
                    verified=row.verified,
                    position=row.position,
                ),
            )
            for row in self._connection.execute(query)
        ]

    # ------------------------------------------------------------------
    # Identity

    def twitter_handles(self, wallets: Sequence[str]) -> list[tuple[str, str]]:
        query = select(TwitterHandle.wallet_address, TwitterHandle.twitter_handle).where(
            TwitterHandle.wallet_address.in_(wallets)
        )
        return [(row.wallet_address, row.twitter_handle) for row in self._connection.execute(query)]


__all__ = ["NftRepository"]
