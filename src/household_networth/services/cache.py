"""In-process TTL cache with single-flight refresh per key."""
import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    stored_at: float


class TimedCache(Generic[K, V]):
    """Key -> value cache with a fixed freshness window.

    get_or_fetch() collapses concurrent misses for the same key onto one
    in-flight fetch: the first caller runs it, later callers await its result.
    Failed fetches are never stored.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[K, _Entry[V]] = {}
        self._inflight: dict[K, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: K) -> V | None:
        """Return the value if it is still inside the freshness window."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.stored_at >= self._ttl:
            return None
        return entry.value

    def peek(self, key: K) -> V | None:
        """Return the last stored value regardless of age."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def invalidate(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: K,
        fetch: Callable[[], Awaitable[V]],
        *,
        force: bool = False,
    ) -> tuple[V, bool]:
        """Return (value, from_cache), fetching at most once per key at a time.

        Args:
            key: Cache key.
            fetch: Zero-argument coroutine factory producing a fresh value.
            force: Skip the fresh-entry check (still joins an in-flight fetch).
        """
        if not force:
            cached = self.get(key)
            if cached is not None:
                return cached, True

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending), False

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await fetch()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so a fetch nobody else awaited does not warn on GC.
            future.exception()
            raise
        else:
            self.set(key, value)
            future.set_result(value)
            return value, False
        finally:
            self._inflight.pop(key, None)
