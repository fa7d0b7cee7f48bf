"""Compile NFT filter specifications into a single parameterized statement."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, and_, exists, select
from sqlalchemy.engine import Connection, Row
from sqlalchemy.orm import aliased

from nftquery.core import config
from nftquery.domain import FilterSpec, Nft, NftListing, NftOwner
from nftquery.models import (
    Attribute,
    BidReceipt,
    CurrentMetadataOwner,
    ListingReceipt,
    Metadata,
    MetadataCollectionKey,
    MetadataCreator,
    MetadataJson,
)

# Alias for the decorated listing so the correlated sub-query can scan
# listing_receipts independently of the outer join.
BestListing = aliased(ListingReceipt, name="best_listing")

NFT_COLUMNS = (
    Metadata.address,
    Metadata.name,
    Metadata.symbol,
    Metadata.uri,
    Metadata.seller_fee_basis_points,
    Metadata.update_authority_address,
    Metadata.mint_address,
    Metadata.primary_sale_happened,
    Metadata.slot,
    MetadataJson.description,
    MetadataJson.image,
    MetadataJson.animation_url,
    MetadataJson.external_url,
    MetadataJson.category,
    MetadataJson.model,
    CurrentMetadataOwner.owner_address,
    CurrentMetadataOwner.token_account_address,
)

LISTING_COLUMNS = (
    BestListing.address.label("listing_address"),
    BestListing.trade_state.label("listing_trade_state"),
    BestListing.auction_house.label("listing_auction_house"),
    BestListing.seller.label("listing_seller"),
    BestListing.price.label("listing_price"),
    BestListing.token_size.label("listing_token_size"),
    BestListing.created_at.label("listing_created_at"),
)


def active_listing_condition(listing=ListingReceipt):
    return and_(listing.purchase_receipt.is_(None), listing.canceled_at.is_(None))


def best_listing_address(auction_houses: Sequence[str] | None = None):
    """Correlated sub-query selecting the winning active listing per outer row.

    Only listings placed by the current owner qualify. When several qualify,
    the lowest price wins, then the earliest ``created_at``, then the lowest
    listing address.
    """

    query = select(ListingReceipt.address).where(
        ListingReceipt.metadata_address == Metadata.address,
        ListingReceipt.seller == CurrentMetadataOwner.owner_address,
        active_listing_condition(),
    )
    if auction_houses:
        query = query.where(ListingReceipt.auction_house.in_(auction_houses))

    return (
        query.order_by(
            ListingReceipt.price.asc(),
            ListingReceipt.created_at.asc(),
            ListingReceipt.address.asc(),
        )
        .limit(1)
        .correlate(Metadata, CurrentMetadataOwner)
        .scalar_subquery()
    )


def _attribute_predicates(spec: FilterSpec) -> list[Any]:
    predicates: list[Any] = []
    for attribute in spec.attributes or ():
        predicates.append(
            exists()
            .where(
                Attribute.metadata_address == Metadata.address,
                Attribute.trait_type == attribute.trait_type,
                Attribute.value.in_(attribute.values),
            )
            .correlate(Metadata)
        )
    return predicates


def _offer_predicate(spec: FilterSpec):
    conditions: list[Any] = [
        BidReceipt.metadata_address == Metadata.address,
        active_listing_condition(BidReceipt),
    ]
    if spec.offerers:
        conditions.append(BidReceipt.buyer.in_(spec.offerers))
    if spec.auction_houses:
        conditions.append(BidReceipt.auction_house.in_(spec.auction_houses))
    return exists().where(*conditions).correlate(Metadata)


def compile_list_query(spec: FilterSpec, *, default_limit: int | None = None) -> Select:
    """Translate ``spec`` into one statement returning a deterministic page.

    The statement text depends only on which categories of ``spec`` are
    present; every value travels as a bound parameter. Each NFT appears at
    most once because fact tables are only reached through ``EXISTS``.
    """

    filters: list[Any] = [Metadata.burned_at.is_(None)]

    if spec.addresses:
        filters.append(Metadata.address.in_(spec.addresses))
    if spec.owners:
        filters.append(CurrentMetadataOwner.owner_address.in_(spec.owners))
    if spec.update_authorities:
        filters.append(Metadata.update_authority_address.in_(spec.update_authorities))
    if spec.creators:
        filters.append(
            exists()
            .where(
                MetadataCreator.metadata_address == Metadata.address,
                MetadataCreator.creator_address.in_(spec.creators),
                MetadataCreator.verified.is_(True),
            )
            .correlate(Metadata)
        )
    if spec.collections:
        filters.append(
            exists()
            .where(
                MetadataCollectionKey.metadata_address == Metadata.address,
                MetadataCollectionKey.collection_address.in_(spec.collections),
            )
            .correlate(Metadata)
        )
    filters.extend(_attribute_predicates(spec))
    if spec.filters_offers:
        filters.append(_offer_predicate(spec))

    if spec.listed is True:
        filters.append(BestListing.price.is_not(None))
    elif spec.listed is False:
        filters.append(BestListing.price.is_(None))

    limit = spec.limit
    if limit is None:
        limit = default_limit if default_limit is not None else config.get_settings().default_page_size

    return (
        select(*NFT_COLUMNS, *LISTING_COLUMNS)
        .select_from(Metadata)
        .join(MetadataJson, MetadataJson.metadata_address == Metadata.address)
        .join(
            CurrentMetadataOwner,
            CurrentMetadataOwner.mint_address == Metadata.mint_address,
        )
        .outerjoin(
            BestListing,
            BestListing.address == best_listing_address(spec.auction_houses),
        )
        .where(*filters)
        .order_by(
            BestListing.price.asc().nulls_last(),
            Metadata.name.asc(),
            Metadata.address.asc(),
        )
        .limit(limit)
        .offset(spec.offset)
    )


def row_to_nft(row: Row) -> Nft:
    listing = None
    if row.listing_address is not None:
        listing = NftListing(
            address=row.listing_address,
            trade_state=row.listing_trade_state,
            auction_house=row.listing_auction_house,
            seller=row.listing_seller,
            metadata=row.address,
            price=row.listing_price,
            token_size=row.listing_token_size,
            created_at=row.listing_created_at,
        )

    return Nft(
        address=row.address,
        name=row.name,
        symbol=row.symbol,
        uri=row.uri,
        seller_fee_basis_points=row.seller_fee_basis_points,
        update_authority_address=row.update_authority_address,
        mint_address=row.mint_address,
        primary_sale_happened=row.primary_sale_happened,
        slot=row.slot,
        description=row.description,
        image=row.image,
        animation_url=row.animation_url,
        external_url=row.external_url,
        category=row.category,
        model=row.model,
        owner=NftOwner(
            address=row.owner_address,
            associated_token_account_address=row.token_account_address,
        ),
        listing=listing,
    )


def list_nfts(connection: Connection, spec: FilterSpec, *, default_limit: int | None = None) -> list[Nft]:
    """Execute the compiled page query for ``spec``."""

    rows = connection.execute(compile_list_query(spec, default_limit=default_limit)).all()
    return [row_to_nft(row) for row in rows]


def nfts_by_address(connection: Connection, addresses: Sequence[str]) -> list[Nft]:
    """Load unburned NFTs (with their listing decoration) for point lookups."""

    if not addresses:
        return []
    query = compile_list_query(FilterSpec(addresses=tuple(addresses))).limit(None).offset(None)
    return [row_to_nft(row) for row in connection.execute(query).all()]


__all__ = [
    "active_listing_condition",
    "best_listing_address",
    "compile_list_query",
    "list_nfts",
    "nfts_by_address",
    "row_to_nft",
]
