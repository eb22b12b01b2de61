"""
Location providers, provider selection and one-shot location requests
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from errors import LocationUnavailable, RequestCancelled
from models import Accuracy, LocationCriteria, LocationFix, Power

logger = logging.getLogger("location")


class LocationRequest:
    """
    Handle for a single outstanding location request.

    Resolved at most once by the provider (possibly from a worker thread).
    `cancel()` de-registers the request: callbacks that have not yet run are
    dropped and `result()` raises RequestCancelled from then on.
    """

    def __init__(self, provider: str):
        self.provider = provider
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._fix: Optional[LocationFix] = None
        self._error: Optional[Exception] = None
        self._cancelled = False
        self._callbacks: List[Callable[["LocationRequest"], None]] = []

    def set_result(self, fix: LocationFix) -> bool:
        return self._complete(fix, None)

    def set_exception(self, error: Exception) -> bool:
        return self._complete(None, error)

    def _complete(self, fix, error) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._fix = fix
            self._error = error
            self._done.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            cb(self)
        return True

    def cancel(self) -> bool:
        """Release the request. Returns True if it was still pending."""
        with self._lock:
            was_pending = not self._done.is_set()
            self._cancelled = True
            self._callbacks.clear()
            self._done.set()
        if was_pending:
            logger.debug(f"Cancelled pending location request on {self.provider}")
        return was_pending

    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._done.is_set()

    def add_done_callback(self, fn: Callable[["LocationRequest"], None]):
        with self._lock:
            if not self._done.is_set():
                self._callbacks.append(fn)
                return
            if self._cancelled:
                return
        fn(self)

    def result(self, timeout: Optional[float] = None) -> LocationFix:
        if not self._done.wait(timeout):
            raise LocationUnavailable(f"Timed out waiting for a fix from {self.provider}")
        if self._cancelled:
            raise RequestCancelled(f"Location request on {self.provider} was cancelled")
        if self._error is not None:
            raise self._error
        return self._fix

    def __repr__(self):
        if self._cancelled:
            status = "cancelled"
        elif self.done():
            status = "done"
        else:
            status = "pending"
        return f"LocationRequest({self.provider}, {status})"


class LocationProvider:
    """Base for location sources. Subclasses set the class attributes and override the two fetch methods."""
    name = "base"
    power = Power.LOW
    accuracy = Accuracy.COARSE
    has_monetary_cost = False

    @property
    def enabled(self) -> bool:
        return True

    def matches(self, criteria: LocationCriteria) -> bool:
        if self.power > criteria.power:
            return False
        # a finer fix than asked for is acceptable
        if self.accuracy > criteria.accuracy:
            return False
        if self.has_monetary_cost and not criteria.cost_allowed:
            return False
        return True

    def get_last_known_location(self) -> Optional[LocationFix]:
        raise NotImplementedError

    def request_single_update(self) -> LocationRequest:
        raise NotImplementedError


class LocationManager:
    """Registry of providers; hands out one-shot requests and delivers their results through `dispatch`."""

    def __init__(self, providers: Optional[List[LocationProvider]] = None,
                 dispatch: Optional[Callable[[Callable[[], None]], None]] = None):
        self._providers: Dict[str, LocationProvider] = {}
        for p in providers or []:
            self.add_provider(p)
        self._dispatch = dispatch or (lambda fn: fn())

    def add_provider(self, provider: LocationProvider):
        self._providers[provider.name] = provider
        logger.debug(f"Registered location provider {provider.name} "
                     f"(power={provider.power.name}, accuracy={provider.accuracy.name})")

    def set_dispatch(self, dispatch: Callable[[Callable[[], None]], None]):
        self._dispatch = dispatch

    def all_providers(self) -> List[str]:
        return list(self._providers)

    def get_best_provider(self, criteria: LocationCriteria, enabled_only: bool = True) -> Optional[str]:
        """Name of the lowest-power provider that satisfies `criteria`, or None."""
        candidates = [
            p for p in self._providers.values()
            if p.matches(criteria) and (p.enabled or not enabled_only)
        ]
        if not candidates:
            return None
        # sorted() is stable, so registration order breaks ties
        best = sorted(candidates, key=lambda p: p.power)[0]
        return best.name

    def get_last_known_location(self, provider: str) -> Optional[LocationFix]:
        return self._providers[provider].get_last_known_location()

    def request_single_update(self, provider: str,
                              listener: Callable[[LocationRequest], None]) -> LocationRequest:
        """Start a one-shot request; `listener` runs via dispatch unless the request is removed first."""
        request = self._providers[provider].request_single_update()

        def deliver(req: LocationRequest):
            def run():
                if req.cancelled():
                    logger.debug(f"Dropping result of removed request on {provider}")
                    return
                listener(req)
            self._dispatch(run)

        request.add_done_callback(deliver)
        logger.debug(f"Requested single location update from {provider}")
        return request

    def remove_updates(self, request: Optional[LocationRequest]):
        if request is not None:
            request.cancel()
