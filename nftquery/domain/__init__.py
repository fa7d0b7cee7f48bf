"""Domain models representing NFT read data and filter specifications."""

from .filters import AttributeFilter, FilterSpec
from .models import (
    Nft,
    NftActivity,
    NftAttribute,
    NftCreator,
    NftListing,
    NftOffer,
    NftOwner,
    NftPurchase,
    TwitterProfile,
    Wallet,
)

__all__ = [
    "AttributeFilter",
    "FilterSpec",
    "Nft",
    "NftActivity",
    "NftAttribute",
    "NftCreator",
    "NftListing",
    "NftOffer",
    "NftOwner",
    "NftPurchase",
    "TwitterProfile",
    "Wallet",
]
