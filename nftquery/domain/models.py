"""Typed read models returned by the query core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class NftOwner:
    """Current holder of an NFT's mint."""

    address: str
    associated_token_account_address: str


@dataclass(slots=True)
class NftListing:
    """A listing receipt placed on an auction house."""

    address: str
    trade_state: str
    auction_house: str
    seller: str
    metadata: str
    price: int
    token_size: int
    created_at: datetime
    purchase_receipt: str | None = None
    canceled_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.purchase_receipt is None and self.canceled_at is None


@dataclass(slots=True)
class NftOffer:
    """A bid receipt placed by a buyer."""

    address: str
    trade_state: str
    auction_house: str
    buyer: str
    metadata: str
    price: int
    token_size: int
    created_at: datetime
    purchase_receipt: str | None = None
    canceled_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.purchase_receipt is None and self.canceled_at is None


@dataclass(slots=True)
class NftPurchase:
    address: str
    auction_house: str
    buyer: str
    seller: str
    metadata: str
    price: int
    token_size: int
    created_at: datetime


@dataclass(slots=True)
class NftAttribute:
    metadata_address: str
    trait_type: str | None
    value: str | None


@dataclass(slots=True)
class NftCreator:
    metadata_address: str
    address: str
    share: int
    verified: bool
    position: int | None = None


@dataclass(slots=True)
class TwitterProfile:
    """Public profile fields resolved from a Twitter handle."""

    handle: str
    profile_image_url: str | None = None
    description: str | None = None


@dataclass(slots=True)
class Wallet:
    """A wallet participating in an activity, with optional social decoration."""

    address: str
    twitter_handle: str | None = None
    profile: TwitterProfile | None = None


@dataclass(slots=True)
class NftActivity:
    """One listing or purchase event touching an NFT."""

    address: str
    metadata: str
    auction_house: str
    price: int
    created_at: datetime
    activity_type: str
    wallets: list[Wallet] = field(default_factory=list)


@dataclass(slots=True)
class Nft:
    """An unburned NFT with its JSON projection, owner and best active listing."""

    address: str
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    update_authority_address: str
    mint_address: str
    primary_sale_happened: bool
    slot: int | None
    description: str | None
    image: str | None
    animation_url: str | None
    external_url: str | None
    category: str | None
    model: str | None
    owner: NftOwner | None = None
    listing: NftListing | None = None

    @property
    def price(self) -> int | None:
        return self.listing.price if self.listing else None
