"""
Request coalescing to prevent duplicate upstream fetches.

When several callers ask for the same key at once (e.g. two searches hitting
an empty player directory), only one upstream call is made and all callers
share its result or its error.
"""
import threading
import logging
from typing import Dict, Optional, Callable, Any
from dataclasses import dataclass, field

logger = logging.getLogger("cache.coalescer")


@dataclass
class InFlightRequest:
    """Tracks an in-progress upstream request."""
    event: threading.Event = field(default_factory=threading.Event)
    result: Optional[Any] = None
    error: Optional[Exception] = None
    waiter_count: int = 0


class RequestCoalescer:
    """
    Ensures concurrent requests for the same key share one upstream call.

    Usage:
        coalescer = RequestCoalescer()
        roster = coalescer.get_or_fetch("directory", provider.fetch_roster)
    """

    def __init__(self, timeout: float = 60.0):
        """
        Args:
            timeout: Max seconds a waiter blocks on an in-flight request
        """
        self._in_flight: Dict[str, InFlightRequest] = {}
        self._lock = threading.Lock()
        self._timeout = timeout

    def get_or_fetch(self, key: str, fetch_fn: Callable[[], Any]) -> Any:
        """
        Join an in-flight request for key, or start one with fetch_fn.

        Raises:
            TimeoutError: If waiting for the in-flight request times out
            Exception: Any error from fetch_fn is propagated to every caller
        """
        with self._lock:
            in_flight = self._in_flight.get(key)
            if in_flight is not None:
                in_flight.waiter_count += 1
                is_initiator = False
                logger.debug(f"Coalescing request for {key} (waiters: {in_flight.waiter_count})")
            else:
                in_flight = InFlightRequest()
                self._in_flight[key] = in_flight
                is_initiator = True

        if is_initiator:
            try:
                in_flight.result = fetch_fn()
            except Exception as e:
                in_flight.error = e
                logger.warning(f"Fetch failed for {key}: {e}")
            finally:
                in_flight.event.set()
                with self._lock:
                    self._in_flight.pop(key, None)
        elif not in_flight.event.wait(timeout=self._timeout):
            logger.error(f"Timeout waiting for coalesced request: {key}")
            raise TimeoutError(f"Request for {key} timed out after {self._timeout}s")

        if in_flight.error:
            raise in_flight.error
        return in_flight.result

    @property
    def active_requests(self) -> int:
        """Number of currently in-flight requests."""
        with self._lock:
            return len(self._in_flight)
