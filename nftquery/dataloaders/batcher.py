"""Batch source contracts shared by every loader."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from typing import Any, Generic, Protocol, TypeVar

from sqlalchemy.engine import Engine

from nftquery.db import checkout
from nftquery.repositories import NftRepository

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Batcher(Protocol[K, V]):
    """Interface every loader talks to.

    ``execute`` performs one round trip for the whole key set and returns a
    mapping holding a value for each requested key. A value may be an
    exception instance, which fails that key alone.
    """

    name: str

    def execute(self, keys: Sequence[K]) -> Mapping[K, V | Exception]:
        """Fetch every key in one operation."""

    def missing(self, key: K) -> V:
        """Return the "not found" value for ``key``."""


class DatabaseBatcher(Generic[K, V]):
    """Run one repository read on a pooled connection per batch.

    Subclasses provide ``fetch`` returning ``(key, record)`` pairs in any
    order, possibly with duplicates or gaps; :meth:`execute` matches them back
    onto the requested keys.
    """

    name = "database"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def fetch(self, repo: NftRepository, keys: Sequence[K]) -> Iterable[tuple[K, Any]]:
        raise NotImplementedError

    def collect(self, keys: Sequence[K], pairs: Iterable[tuple[K, Any]]) -> dict[K, V]:
        raise NotImplementedError

    def missing(self, key: K) -> V:
        raise NotImplementedError

    def execute(self, keys: Sequence[K]) -> dict[K, V]:
        with checkout(self._engine, context=f"failed to load {self.name}") as connection:
            pairs = list(self.fetch(NftRepository(connection), keys))
        return self.collect(keys, pairs)


class OneToOneBatcher(DatabaseBatcher[K, V | None]):
    """Batcher for relations holding at most one record per key.

    When storage yields several rows for one key the first one wins.
    """

    def missing(self, key: K) -> None:
        return None

    def collect(self, keys: Sequence[K], pairs: Iterable[tuple[K, Any]]) -> dict[K, Any]:
        results: dict[K, Any] = {key: None for key in keys}
        for key, record in pairs:
            if key in results and results[key] is None:
                results[key] = record
        return results


class OneToManyBatcher(DatabaseBatcher[K, list[V]]):
    """Batcher grouping every record of a key into a list, in storage order."""

    def missing(self, key: K) -> list[V]:
        return []

    def collect(self, keys: Sequence[K], pairs: Iterable[tuple[K, Any]]) -> dict[K, list[V]]:
        results: dict[K, list[V]] = {key: [] for key in keys}
        for key, record in pairs:
            bucket = results.get(key)
            if bucket is not None:
                bucket.append(record)
        return results


class FunctionBatcher(Generic[K, V]):
    """Adapt a plain ``keys -> mapping`` callable to the batcher interface."""

    def __init__(
        self,
        fn: Callable[[Sequence[K]], Mapping[K, V | Exception]],
        *,
        name: str | None = None,
        default: V | None = None,
    ) -> None:
        self._fn = fn
        self._default = default
        self.name = name or getattr(fn, "__name__", "function")

    def execute(self, keys: Sequence[K]) -> Mapping[K, V | Exception]:
        return self._fn(keys)

    def missing(self, key: K) -> V | None:
        return self._default


__all__ = [
    "Batcher",
    "DatabaseBatcher",
    "FunctionBatcher",
    "OneToManyBatcher",
    "OneToOneBatcher",
]
