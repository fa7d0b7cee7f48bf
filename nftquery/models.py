"""Read contracts for the tables populated by the indexer ingestion pipeline."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Metadata(Base):
    __tablename__ = "metadatas"

    address: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False, default="")
    uri: Mapped[str] = mapped_column(Text, nullable=False)
    seller_fee_basis_points: Mapped[int] = mapped_column(Integer, nullable=False)
    update_authority_address: Mapped[str] = mapped_column(String, nullable=False, index=True)
    mint_address: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    primary_sale_happened: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_mutable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    slot: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    burned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class MetadataJson(Base):
    __tablename__ = "metadata_jsons"

    metadata_address: Mapped[str] = mapped_column(String, primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    animation_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    external_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    model: Mapped[str | None] = mapped_column(String, nullable=True)


class CurrentMetadataOwner(Base):
    __tablename__ = "current_metadata_owners"

    mint_address: Mapped[str] = mapped_column(String, primary_key=True)
    owner_address: Mapped[str] = mapped_column(String, nullable=False, index=True)
    token_account_address: Mapped[str] = mapped_column(String, nullable=False)
    slot: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class ListingReceipt(Base):
    __tablename__ = "listing_receipts"

    address: Mapped[str] = mapped_column(String, primary_key=True)
    trade_state: Mapped[str] = mapped_column(String, nullable=False)
    bookkeeper: Mapped[str] = mapped_column(String, nullable=False)
    auction_house: Mapped[str] = mapped_column(String, nullable=False, index=True)
    seller: Mapped[str] = mapped_column(String, nullable=False, index=True)
    metadata_address: Mapped[str] = mapped_column("metadata", String, nullable=False, index=True)
    purchase_receipt: Mapped[str | None] = mapped_column(String, nullable=True)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    token_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class BidReceipt(Base):
    __tablename__ = "bid_receipts"

    address: Mapped[str] = mapped_column(String, primary_key=True)
    trade_state: Mapped[str] = mapped_column(String, nullable=False)
    bookkeeper: Mapped[str] = mapped_column(String, nullable=False)
    auction_house: Mapped[str] = mapped_column(String, nullable=False, index=True)
    buyer: Mapped[str] = mapped_column(String, nullable=False, index=True)
    metadata_address: Mapped[str] = mapped_column("metadata", String, nullable=False, index=True)
    purchase_receipt: Mapped[str | None] = mapped_column(String, nullable=True)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    token_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PurchaseReceipt(Base):
    __tablename__ = "purchase_receipts"

    address: Mapped[str] = mapped_column(String, primary_key=True)
    bookkeeper: Mapped[str] = mapped_column(String, nullable=False)
    buyer: Mapped[str] = mapped_column(String, nullable=False)
    seller: Mapped[str] = mapped_column(String, nullable=False)
    auction_house: Mapped[str] = mapped_column(String, nullable=False)
    metadata_address: Mapped[str] = mapped_column("metadata", String, nullable=False, index=True)
    token_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Attribute(Base):
    __tablename__ = "attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metadata_address: Mapped[str] = mapped_column(String, nullable=False, index=True)
    trait_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_verified_creator: Mapped[str | None] = mapped_column(String, nullable=True)


class MetadataCreator(Base):
    __tablename__ = "metadata_creators"

    metadata_address: Mapped[str] = mapped_column(String, primary_key=True)
    creator_address: Mapped[str] = mapped_column(String, primary_key=True)
    share: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)


class MetadataCollectionKey(Base):
    __tablename__ = "metadata_collection_keys"

    metadata_address: Mapped[str] = mapped_column(String, primary_key=True)
    collection_address: Mapped[str] = mapped_column(String, primary_key=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class TwitterHandle(Base):
    __tablename__ = "twitter_handle_name_services"

    wallet_address: Mapped[str] = mapped_column(String, primary_key=True)
    twitter_handle: Mapped[str] = mapped_column(String, nullable=False)
    slot: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


__all__ = [
    "Attribute",
    "BidReceipt",
    "CurrentMetadataOwner",
    "ListingReceipt",
    "Metadata",
    "MetadataCollectionKey",
    "MetadataCreator",
    "MetadataJson",
    "PurchaseReceipt",
    "TwitterHandle",
]
