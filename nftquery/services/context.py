from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy.engine import Engine

from nftquery.core.config import Settings, settings as default_settings
from nftquery.dataloaders import (
    BidReceiptsBatcher,
    ListingReceiptsBatcher,
    Loader,
    NftActivitiesBatcher,
    NftAttributesBatcher,
    NftBatcher,
    NftCreatorsBatcher,
    NftOwnerBatcher,
    NftPageBatcher,
    PurchaseReceiptsBatcher,
    TwitterClient,
    TwitterHandleBatcher,
    TwitterProfileBatcher,
)
from nftquery.dataloaders.loader import Scheduler
from nftquery.db import create_db_engine, get_engine
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
    Wallet,
)


@dataclass(slots=True)
class SharedResources:
    """Process-wide collaborators shared by every request."""

    engine: Engine
    twitter: TwitterClient
    settings: Settings = field(default_factory=lambda: default_settings)

    def close(self) -> None:
        self.twitter.close()
        self.engine.dispose()


def build_shared_resources(config: Settings | None = None) -> SharedResources:
    """Create the pooled engine and identity client from configuration."""

    config = config or default_settings
    engine = (
        get_engine()
        if config is default_settings
        else create_db_engine(config.resolved_database_url, config=config)
    )
    twitter = TwitterClient(
        base_url=str(config.twitter_api_base_url),
        bearer_token=config.twitter_bearer_token,
        timeout=config.twitter_timeout_seconds,
        batch_size=config.twitter_batch_size,
    )
    return SharedResources(engine=engine, twitter=twitter, settings=config)


class RequestContext:
    """Own one loader per relation kind for the lifetime of one request.

    Loaders do not flush themselves: when one queues the first key of a
    window it notifies the context, and the context asks the event loop to
    flush every loader holding queued keys once the current pass has run. Pass
    ``scheduler`` to take control of flushing, e.g. to call :meth:`flush`
    explicitly.
    """

    def __init__(self, shared: SharedResources, *, scheduler: Scheduler | None = None) -> None:
        self.shared = shared
        self._scheduler = scheduler or self._request_flush
        self._flush_handle: asyncio.Handle | None = None
        self._flush_tasks: set[asyncio.Task[None]] = set()
        self._closed = False

        engine = shared.engine
        self.nft_loader: Loader[str, Nft | None] = self._loader(NftBatcher(engine))
        self.nft_page_loader: Loader[FilterSpec, list[Nft]] = self._loader(
            NftPageBatcher(engine, default_page_size=shared.settings.default_page_size)
        )
        self.nft_owner_loader: Loader[str, NftOwner | None] = self._loader(NftOwnerBatcher(engine))
        self.listing_receipts_loader: Loader[str, list[NftListing]] = self._loader(
            ListingReceiptsBatcher(engine)
        )
        self.bid_receipts_loader: Loader[str, list[NftOffer]] = self._loader(
            BidReceiptsBatcher(engine)
        )
        self.purchase_receipts_loader: Loader[str, list[NftPurchase]] = self._loader(
            PurchaseReceiptsBatcher(engine)
        )
        self.nft_attributes_loader: Loader[str, list[NftAttribute]] = self._loader(
            NftAttributesBatcher(engine)
        )
        self.nft_creators_loader: Loader[str, list[NftCreator]] = self._loader(
            NftCreatorsBatcher(engine)
        )
        self.nft_activities_loader: Loader[str, list[NftActivity]] = self._loader(
            NftActivitiesBatcher(engine)
        )
        self.twitter_handle_loader: Loader[str, str | None] = self._loader(
            TwitterHandleBatcher(engine)
        )
        self.twitter_profile_loader: Loader[str, TwitterProfile | None] = self._loader(
            TwitterProfileBatcher(shared.twitter)
        )

    def _loader(self, batcher) -> Loader[Any, Any]:
        return Loader(batcher, scheduler=self._scheduler)

    @property
    def loaders(self) -> tuple[Loader[Any, Any], ...]:
        return tuple(value for value in vars(self).values() if isinstance(value, Loader))

    def _request_flush(self, loader: Loader[Any, Any]) -> None:
        if self._closed:
            loader.cancel()
            return
        if self._flush_handle is None:
            self._flush_handle = asyncio.get_running_loop().call_soon(self._start_flush)

    def _start_flush(self) -> None:
        self._flush_handle = None
        task = asyncio.get_running_loop().create_task(self.flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    async def flush(self) -> None:
        """Dispatch one batch for every loader holding queued keys."""

        loaders = [loader for loader in self.loaders if loader.pending_keys]
        if loaders:
            await asyncio.gather(*(loader.dispatch() for loader in loaders))

    async def wallet(self, address: str) -> Wallet:
        handle = await self.twitter_handle_loader.load(address)
        return Wallet(address=address, twitter_handle=handle)

    def close(self) -> None:
        """Tear the request down; callers still waiting observe cancellation."""

        if self._closed:
            return
        self._closed = True
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        for task in list(self._flush_tasks):
            task.cancel()
        for loader in self.loaders:
            loader.cancel()
        logger.debug("Request context closed")

    async def __aenter__(self) -> "RequestContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
