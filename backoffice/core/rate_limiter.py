from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable

DEFAULT_LIMIT = 5
DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_MAX_BUCKETS = 10_000


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class RateLimiterService(ABC):
    @abstractmethod
    def check(self, *, client_key: str, endpoint: str, limit: int | None = None) -> RateLimitDecision:
        """Decide se a requisição do cliente para o endpoint pode prosseguir."""


class InMemoryRateLimiterService(RateLimiterService):
    """Janela deslizante em memória por endereço do cliente + endpoint.

    Não é compartilhado entre processos; para vários workers troque por Redis.
    Buckets vazios são descartados; acima de ``max_buckets`` todos os
    buckets expirados são varridos.
    """

    def __init__(
        self,
        *,
        limit: int = DEFAULT_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        max_buckets: int = DEFAULT_MAX_BUCKETS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.max_buckets = max_buckets
        self._clock = clock
        self._store: dict[tuple[str, str], deque[float]] = {}
        self._lock = Lock()

    @property
    def bucket_count(self) -> int:
        with self._lock:
            return len(self._store)

    def _prune(self, key: tuple[str, str], cutoff: float) -> deque[float] | None:
        bucket = self._store.get(key)
        if bucket is None:
            return None
        while bucket and bucket[0] <= cutoff:
            bucket.popleft()
        if not bucket:
            del self._store[key]
            return None
        return bucket

    def _sweep(self, cutoff: float) -> None:
        for key in list(self._store):
            self._prune(key, cutoff)

    def check(self, *, client_key: str, endpoint: str, limit: int | None = None) -> RateLimitDecision:
        effective_limit = limit if limit is not None else self.limit
        now = self._clock()
        cutoff = now - self.window_seconds
        key = (client_key, endpoint)

        with self._lock:
            bucket = self._prune(key, cutoff)

            if bucket is not None and len(bucket) >= effective_limit:
                retry_after = max(1, int(self.window_seconds - (now - bucket[0])))
                return RateLimitDecision(
                    allowed=False,
                    limit=effective_limit,
                    remaining=0,
                    retry_after_seconds=retry_after,
                )

            if bucket is None:
                if len(self._store) >= self.max_buckets:
                    self._sweep(cutoff)
                bucket = self._store.setdefault(key, deque())
            bucket.append(now)
            return RateLimitDecision(
                allowed=True,
                limit=effective_limit,
                remaining=max(0, effective_limit - len(bucket)),
                retry_after_seconds=0,
            )

    def reset(self) -> None:
        with self._lock:
            self._store.clear()
