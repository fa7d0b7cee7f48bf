"""Request-scoped, memoizing, batch-coalescing point lookups."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Hashable, Iterable
from typing import Any, Generic, TypeVar

from loguru import logger

from .batcher import Batcher

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Scheduler = Callable[["Loader[Any, Any]"], None]


def schedule_soon(loader: "Loader[Any, Any]") -> None:
    """Flush ``loader`` once the branches runnable in this pass have queued keys."""

    loop = asyncio.get_running_loop()
    loop.call_soon(lambda: loader.track(loop.create_task(loader.dispatch())))


def manual_scheduler(loader: "Loader[Any, Any]") -> None:
    """Leave flushing to an explicit :meth:`Loader.dispatch` call."""


class Loader(Generic[K, V]):
    """Coalesce point lookups into one :class:`Batcher` call per batch window.

    ``load`` queues a key and returns an awaitable. Every key queued before
    the window is flushed is fetched by a single ``Batcher.execute`` call;
    outcomes are cached for the lifetime of the loader, except when the whole
    batch fails, in which case every caller of that batch receives the same
    exception and the keys are retried on their next ``load``.
    """

    def __init__(
        self,
        batcher: Batcher[K, V],
        *,
        name: str | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._batcher = batcher
        self.name = name or getattr(batcher, "name", type(batcher).__name__)
        self._scheduler = scheduler or schedule_soon
        self._cache: dict[K, asyncio.Future[V]] = {}
        self._pending: dict[K, asyncio.Future[V]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self.batch_count = 0

    @property
    def pending_keys(self) -> tuple[K, ...]:
        return tuple(self._pending)

    def load(self, key: K) -> asyncio.Future[V]:
        future = self._cache.get(key)
        if future is None:
            future = asyncio.get_running_loop().create_future()
            self._cache[key] = future
            was_idle = not self._pending
            self._pending[key] = future
            if was_idle:
                self._scheduler(self)
        # Shielded so one cancelled caller does not cancel others waiting on the key.
        return asyncio.shield(future)

    async def load_many(
        self, keys: Iterable[K], *, return_exceptions: bool = False
    ) -> list[V | BaseException]:
        futures = [self.load(key) for key in keys]
        if not futures:
            return []
        return list(await asyncio.gather(*futures, return_exceptions=return_exceptions))

    def prime(self, key: K, value: V) -> None:
        """Seed the cache for ``key`` unless it is already loaded or queued."""

        if key in self._cache:
            return
        future: asyncio.Future[V] = asyncio.get_running_loop().create_future()
        future.set_result(value)
        self._cache[key] = future

    def track(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def dispatch(self) -> None:
        """Execute the pending batch, if any, and settle its callers."""

        if not self._pending:
            return

        batch, self._pending = self._pending, {}
        keys = tuple(batch)
        self.batch_count += 1
        logger.debug("Dispatching {} batch with {} key(s)", self.name, len(keys))

        try:
            results = await asyncio.to_thread(self._batcher.execute, keys)
            outcomes = {
                key: results[key] if key in results else self._batcher.missing(key)
                for key in keys
            }
        except asyncio.CancelledError:
            self._forget(batch)
            for future in batch.values():
                future.cancel()
            raise
        except Exception as exc:
            logger.warning("{} batch of {} key(s) failed: {}", self.name, len(keys), exc)
            self._forget(batch)
            for future in batch.values():
                if not future.done():
                    future.set_exception(exc)
            return

        for key, future in batch.items():
            if future.done():
                continue
            value = outcomes[key]
            if isinstance(value, Exception):
                future.set_exception(value)
            else:
                future.set_result(value)

    def cancel(self) -> None:
        """Cancel queued and in-flight batches; waiting callers see cancellation."""

        for task in list(self._tasks):
            task.cancel()
        self._forget(self._pending)
        for future in self._pending.values():
            future.cancel()
        self._pending = {}

    def clear(self) -> None:
        self.cancel()
        self._cache.clear()

    def _forget(self, batch: dict[K, asyncio.Future[V]]) -> None:
        for key, future in batch.items():
            if self._cache.get(key) is future:
                del self._cache[key]


__all__ = ["Loader", "Scheduler", "manual_scheduler", "schedule_soon"]
