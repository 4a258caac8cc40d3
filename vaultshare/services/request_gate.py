"""
Process-local request gate.

Each ``operation:origin`` key gets a fixed window that resets the first time
the key is seen after the window ends. Keys live in a bounded LRU so a long
running process does not accumulate one entry per client forever. Counts
are per process; run behind a single worker or accept looser limits.
"""

import logging
import math
import os
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass

from fastapi import Depends, Request

from vaultshare.errors import RateLimited

logger = logging.getLogger("vaultshare.ratelimit")

WINDOW_SECONDS = 60.0
DEFAULT_CAPACITY = int(os.getenv("RATE_LIMIT_CAPACITY", "10000"))

# Requests per window for each operation class
LIMITS = {
    "token": 60,
    "view": 60,
    "download": 30,
}


@dataclass
class _Window:
    count: int
    reset_at: float


class RequestGate:
    def __init__(
        self,
        limits: dict[str, int] | None = None,
        window_seconds: float = WINDOW_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock=time.monotonic,
    ):
        self.limits = dict(limits or LIMITS)
        self.window_seconds = window_seconds
        self.capacity = capacity
        self.clock = clock
        self._windows: OrderedDict[str, _Window] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def check(self, operation: str, origin: str) -> None:
        """Count one request; raise RateLimited once the budget is spent."""
        limit = self.limits[operation]
        key = f"{operation}:{origin}"
        now = self.clock()

        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows.move_to_end(key)
                self._evict()
                return
            self._windows.move_to_end(key)
            if window.count >= limit:
                retry_after = max(1, math.ceil(window.reset_at - now))
                logger.warning("Rate limit exceeded: %s", key)
                raise RateLimited(retry_after=retry_after)
            window.count += 1

    def _evict(self) -> None:
        while len(self._windows) > self.capacity:
            self._windows.popitem(last=False)


def client_origin(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "local"


request_gate = RequestGate()


def get_request_gate() -> RequestGate:
    return request_gate


def gate(operation: str):
    """Route dependency that charges ``operation`` against the caller's origin."""

    def dependency(request: Request, limiter: RequestGate = Depends(get_request_gate)) -> None:
        limiter.check(operation, client_origin(request))

    return dependency
