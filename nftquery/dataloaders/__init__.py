"""Batched, request-scoped loaders over the indexer store and identity service."""

from .batcher import Batcher, DatabaseBatcher, FunctionBatcher, OneToManyBatcher, OneToOneBatcher
from .database import (
    BidReceiptsBatcher,
    ListingReceiptsBatcher,
    NftActivitiesBatcher,
    NftAttributesBatcher,
    NftBatcher,
    NftCreatorsBatcher,
    NftOwnerBatcher,
    NftPageBatcher,
    PurchaseReceiptsBatcher,
    TwitterHandleBatcher,
)
from .loader import Loader, manual_scheduler, schedule_soon
from .twitter import TwitterClient, TwitterProfileBatcher

__all__ = [
    "Batcher",
    "BidReceiptsBatcher",
    "DatabaseBatcher",
    "FunctionBatcher",
    "ListingReceiptsBatcher",
    "Loader",
    "NftActivitiesBatcher",
    "NftAttributesBatcher",
    "NftBatcher",
    "NftCreatorsBatcher",
    "NftOwnerBatcher",
    "NftPageBatcher",
    "OneToManyBatcher",
    "OneToOneBatcher",
    "PurchaseReceiptsBatcher",
    "TwitterClient",
    "TwitterHandleBatcher",
    "TwitterProfileBatcher",
    "manual_scheduler",
    "schedule_soon",
]
