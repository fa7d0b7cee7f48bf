from .context import RequestContext, SharedResources, build_shared_resources
from .nft_service import NftService

__all__ = ["NftService", "RequestContext", "SharedResources", "build_shared_resources"]
