"""Read-only NFT marketplace query core."""

from .domain import AttributeFilter, FilterSpec
from .errors import IdentityServiceError, NftQueryError, StorageError
from .services import NftService, RequestContext, SharedResources, build_shared_resources

__all__ = [
    "AttributeFilter",
    "FilterSpec",
    "IdentityServiceError",
    "NftQueryError",
    "NftService",
    "RequestContext",
    "SharedResources",
    "StorageError",
    "build_shared_resources",
]
