from __future__ import annotations

import threading
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request, status


class InMemoryRateLimiter:
    """Sliding-window counter per key. Process-local; not shared between workers."""

    def __init__(self) -> None:
        self._events: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> float:
        """Record one event; return 0 when allowed, else seconds until the oldest event expires."""
        now = time.time()
        window = max(1, window_seconds)
        cutoff = now - window
        with self._lock:
            q = self._events[key]
            while q and q[0] < cutoff:
                q.popleft()
            if len(q) >= max(1, limit):
                return max(0.0, q[0] + window - now)
            q.append(now)
            return 0.0

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        return self.hit(key, limit, window_seconds) == 0.0

    def reset(self) -> None:
        with self._lock:
            self._events.clear()


rate_limiter = InMemoryRateLimiter()


def build_rate_limit_dependency(prefix: str, limit: int, window_seconds: int):
    async def _dependency(request: Request):
        client_ip = request.client.host if request.client else 'unknown'
        retry_after = rate_limiter.hit(f'{prefix}:{client_ip}', limit, window_seconds)
        if not retry_after:
            return
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                'error_code': 'RATE_LIMITED',
                'message': 'Too many requests',
                'details': {
                    'limit': int(limit),
                    'window_seconds': int(window_seconds),
                    'retry_after_seconds': int(retry_after) + 1,
                    'scope': prefix,
                },
            },
            headers={'Retry-After': str(int(retry_after) + 1)},
        )

    return _dependency
