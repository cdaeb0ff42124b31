"""
Request Quota

Client-side courtesy check against the API's daily request ceiling.
The server enforces its own limit regardless of this counter.
"""

import threading

import structlog

from avocado_client.exceptions import RateLimitExceeded

logger = structlog.get_logger()

# https://avocado.io/guacamole/avocado-api#api-throttle-limits
DEFAULT_MAX_REQUESTS = 10000


class RateLimiter:
    """
    Counts completed requests against a fixed ceiling.

    A request reserves a slot with acquire() before it is sent, then either
    commit() once the HTTP exchange completed (whatever the status) or
    release() when the transport failed before any exchange. Reservations
    are checked together with the committed count under one lock, so
    concurrent callers cannot overshoot the ceiling.

    The committed count only ever grows; reset() starts a new window.
    """

    _shared: "RateLimiter | None" = None
    _shared_lock = threading.Lock()

    def __init__(self, max_requests: int = DEFAULT_MAX_REQUESTS, enabled: bool = False):
        self.max_requests = max_requests
        self.enabled = enabled
        self._count = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    @classmethod
    def shared(cls, max_requests: int = DEFAULT_MAX_REQUESTS, enabled: bool = True) -> "RateLimiter":
        """
        Get the process-wide limiter, for clients that should share one quota.

        The arguments only apply when the first call creates the limiter;
        later calls return it unchanged.
        """
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls(max_requests=max_requests, enabled=enabled)
            return cls._shared

    @property
    def count(self) -> int:
        """Requests completed since construction or the last reset."""
        return self._count

    @property
    def remaining(self) -> int:
        with self._lock:
            return max(0, self.max_requests - self._count - self._in_flight)

    def acquire(self) -> bool:
        """
        Reserve a slot for one request.

        Returns:
            True if a slot was reserved, False when limiting is disabled

        Raises:
            RateLimitExceeded: if the ceiling has been reached
        """
        if not self.enabled:
            return False

        with self._lock:
            if self._count + self._in_flight >= self.max_requests:
                logger.warning(
                    "rate_limit_exceeded",
                    count=self._count,
                    in_flight=self._in_flight,
                    max_requests=self.max_requests,
                )
                raise RateLimitExceeded(self._count, self.max_requests)
            self._in_flight += 1
        return True

    def commit(self, reserved: bool) -> None:
        """Account for a completed request."""
        if not reserved:
            return
        with self._lock:
            self._in_flight -= 1
            self._count += 1

    def release(self, reserved: bool) -> None:
        """Give back a slot whose request never reached the server."""
        if not reserved:
            return
        with self._lock:
            self._in_flight -= 1

    def reset(self) -> None:
        """Start a new accounting window."""
        with self._lock:
            self._count = 0
        logger.info("rate_limit_reset", max_requests=self.max_requests)
