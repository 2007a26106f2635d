# perfdemo/cache.py
import asyncio
import logging
import random
from dataclasses import asdict, dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from .constants import BATCH_LATENCY, FETCH_LATENCY
from .errors import FetchTimeoutError
from .helpers import validate_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Mapping
    fetched_at: datetime


@dataclass(frozen=True)
class CacheMetrics:
    request_count: int = 0
    cache_hit_count: int = 0
    cached_key_count: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def make_payload(key: str) -> dict:
    return {"key": key, "data": f"Data for {key}"}


def distinct_keys(keys: Iterable[str]) -> List[str]:
    # A bare string would otherwise be split into one key per character
    if isinstance(keys, str):
        raise ValueError(f"keys must be a collection of keys, not the string {keys!r}")
    return list(dict.fromkeys(validate_key(k) for k in keys))


class MockCacheClient:
    """Read-through in-memory cache in front of a simulated, slow backend.

    Misses on concurrent ``fetch`` calls for the same key are not merged:
    each one issues its own request and the last to finish wins the slot.
    """

    def __init__(
        self,
        latency: float = FETCH_LATENCY,
        batch_latency: float = BATCH_LATENCY,
        failure_rate: float = 0.0,
        seed: Optional[int] = None,
        sleep=asyncio.sleep,
        clock=datetime.now,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.latency = latency
        self.batch_latency = batch_latency
        self.failure_rate = failure_rate
        self._rng = random.Random(seed)
        self._sleep = sleep
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._request_count = 0
        self._cache_hit_count = 0

    def __contains__(self, key) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        return self._cache.get(key)

    def get_metrics(self) -> CacheMetrics:
        return CacheMetrics(
            request_count=self._request_count,
            cache_hit_count=self._cache_hit_count,
            cached_key_count=len(self._cache),
        )

    def reset(self) -> None:
        self._cache.clear()
        self._request_count = 0
        self._cache_hit_count = 0
        logger.info("Cache client reset")

    async def _request(self, keys, latency: float) -> Dict[str, dict]:
        # One simulated round trip, whatever the number of keys
        self._request_count += 1
        await self._sleep(latency)
        if self.failure_rate and self._rng.random() < self.failure_rate:
            logger.warning("Simulated request timed out for %s", ", ".join(keys))
            raise FetchTimeoutError(keys)
        fetched_at = self._clock()
        out = {}
        for key in keys:
            value = make_payload(key)
            self._cache[key] = CacheEntry(value=MappingProxyType(dict(value)), fetched_at=fetched_at)
            out[key] = value
        return out

    async def fetch(self, key: str) -> dict:
        validate_key(key)
        entry = self._cache.get(key)
        if entry is not None:
            self._cache_hit_count += 1
            logger.info("Cache hit for %r, no request needed", key)
            return dict(entry.value)
        logger.info("Cache miss for %r, requesting", key)
        out = await self._request([key], self.latency)
        logger.info("Fetched and cached %r (total requests: %d)", key, self._request_count)
        return out[key]

    async def batch_fetch(self, keys: Iterable[str]) -> Dict[str, dict]:
        wanted = distinct_keys(keys)
        cached = [k for k in wanted if k in self._cache]
        uncached = [k for k in wanted if k not in self._cache]

        found = {k: dict(self._cache[k].value) for k in cached}
        if cached:
            self._cache_hit_count += len(cached)
            logger.info("Found %d items in cache: %s", len(cached), ", ".join(cached))
        if not uncached:
            if wanted:
                logger.info("All %d items cached, no request needed", len(wanted))
            return {k: found[k] for k in wanted}

        logger.info("Batch request for %d uncached items: %s", len(uncached), ", ".join(uncached))
        found.update(await self._request(uncached, self.batch_latency))
        logger.info(
            "Batch cached %d items with 1 request (total requests: %d)",
            len(uncached), self._request_count,
        )
        return {k: found[k] for k in wanted}


class UncachedClient:
    """Same interface as MockCacheClient, but every lookup goes to the backend."""

    def __init__(self, latency: float = FETCH_LATENCY, sleep=asyncio.sleep):
        self.latency = latency
        self._sleep = sleep
        self._request_count = 0

    def get_metrics(self) -> CacheMetrics:
        return CacheMetrics(request_count=self._request_count)

    def reset(self) -> None:
        self._request_count = 0

    async def fetch(self, key: str) -> dict:
        validate_key(key)
        self._request_count += 1
        logger.warning("No cache check, requesting %r (total requests: %d)", key, self._request_count)
        await self._sleep(self.latency)
        return make_payload(key)

    async def batch_fetch(self, keys: Iterable[str]) -> Dict[str, dict]:
        wanted = distinct_keys(keys)
        if wanted:
            logger.warning("Making %d individual requests instead of one batch", len(wanted))
        out = {}
        for key in wanted:
            out[key] = await self.fetch(key)
        return out
