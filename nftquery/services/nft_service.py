"""Higher-level conveniences for reading NFTs within one request."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

from loguru import logger

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
    TwitterProfile,
)

from .context import RequestContext


class NftService:
    """Read-only facade over NFT pages, relations and activity feeds.

    Every call goes through the request's loaders, so concurrent resolvers
    share batches and cached results.
    """

    def __init__(self, context: RequestContext) -> None:
        self._context = context

    async def list(self, spec: FilterSpec) -> list[Nft]:
        """Return one page of NFTs matching ``spec``.

        Rows are shared with the point-lookup loaders unless ``spec`` narrows
        the listing decoration to specific auction houses.
        """

        nfts = await self._context.nft_page_loader.load(spec)
        for nft in nfts:
            if spec.auction_houses is None:
                self._context.nft_loader.prime(nft.address, nft)
            if nft.owner is not None:
                self._context.nft_owner_loader.prime(nft.address, nft.owner)
        return nfts

    async def nft(self, address: str) -> Nft | None:
        return await self._context.nft_loader.load(address)

    async def nfts(self, addresses: Iterable[str]) -> list[Nft | None]:
        return await self._context.nft_loader.load_many(addresses)

    async def owner(self, address: str) -> NftOwner | None:
        return await self._context.nft_owner_loader.load(address)

    async def listings(self, address: str) -> list[NftListing]:
        return await self._context.listing_receipts_loader.load(address)

    async def offers(self, address: str) -> list[NftOffer]:
        return await self._context.bid_receipts_loader.load(address)

    async def purchases(self, address: str) -> list[NftPurchase]:
        return await self._context.purchase_receipts_loader.load(address)

    async def attributes(self, address: str) -> list[NftAttribute]:
        return await self._context.nft_attributes_loader.load(address)

    async def creators(self, address: str) -> list[NftCreator]:
        return await self._context.nft_creators_loader.load(address)

    async def activities(self, addresses: Sequence[str]) -> list[NftActivity]:
        """Return listing and purchase activity for ``addresses``, newest first.

        Wallets carrying a twitter handle are decorated with the resolved
        profile; failed profile lookups leave ``profile`` unset.
        """

        unique = list(dict.fromkeys(addresses))
        feeds = await self._context.nft_activities_loader.load_many(unique)
        merged = [activity for feed in feeds for activity in feed]
        merged.sort(key=lambda activity: activity.address)
        merged.sort(key=lambda activity: activity.created_at, reverse=True)

        await self._decorate_profiles(merged)
        return merged

    async def _decorate_profiles(self, activities: Sequence[NftActivity]) -> None:
        handles = list(
            dict.fromkeys(
                wallet.twitter_handle
                for activity in activities
                for wallet in activity.wallets
                if wallet.twitter_handle
            )
        )
        if not handles:
            return

        outcomes = await self._context.twitter_profile_loader.load_many(
            handles, return_exceptions=True
        )
        profiles: dict[str, TwitterProfile | None] = {}
        for handle, outcome in zip(handles, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.debug("Twitter profile lookup for {} failed: {}", handle, outcome)
                profiles[handle] = None
            else:
                profiles[handle] = outcome

        for activity in activities:
            for wallet in activity.wallets:
                if wallet.twitter_handle:
                    wallet.profile = profiles.get(wallet.twitter_handle)


__all__ = ["NftService"]
