"""Repository abstractions for reading the indexer store."""

from .activity_queries import ACTIVITIES_QUERY, load_activities
from .nft_queries import compile_list_query, list_nfts
from .nft_repository import NftRepository

__all__ = [
    "ACTIVITIES_QUERY",
    "NftRepository",
    "compile_list_query",
    "list_nfts",
    "load_activities",
]
