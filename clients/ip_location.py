import logging
import threading
import time
from typing import Optional

import requests

from errors import LocationUnavailable
from models import Accuracy, GeoPoint, LocationFix, Power
from utils.location_manager import LocationProvider, LocationRequest


class IpLocationProvider(LocationProvider):
    """Coarse location from a free IP geolocation service (no key, no GPS, no permissions)."""
    name = "ip"
    power = Power.LOW
    accuracy = Accuracy.COARSE
    URL = "https://ipapi.co/json/"
    USER_AGENT = "sunrise-extension"

    def __init__(self, config: dict, monotonic=time.monotonic, session: Optional[requests.Session] = None):
        self.logger = logging.getLogger("location.ip")
        loc = config.get("location", {})
        self._enabled = bool(loc.get("ip_lookup", True))
        self.url = loc.get("ip_lookup_url", self.URL)
        self.timeout = float(loc.get("ip_lookup_timeout_seconds", 10))
        self._monotonic = monotonic
        self._session = session or requests.Session()
        self._last_fix: Optional[LocationFix] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_last_known_location(self) -> Optional[LocationFix]:
        with self._lock:
            return self._last_fix

    def fetch(self) -> LocationFix:
        """Blocking lookup of the current public IP's approximate position."""
        try:
            r = self._session.get(self.url, headers={"User-Agent": self.USER_AGENT}, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise LocationUnavailable(f"IP geolocation request failed: {e}")

        if data.get("error"):
            raise LocationUnavailable(f"IP geolocation error: {data.get('reason', 'unknown')}")
        if "latitude" not in data or "longitude" not in data:
            raise LocationUnavailable("IP geolocation response missing coordinates")

        fix = LocationFix(
            point=GeoPoint(float(data["latitude"]), float(data["longitude"])),
            elapsed_realtime=self._monotonic(),
            provider=self.name,
            timezone=data.get("timezone"),
        )
        city = data.get("city") or "unknown city"
        self.logger.info(f"IP location: {city} ({fix.point.latitude:.3f}, {fix.point.longitude:.3f})")
        with self._lock:
            self._last_fix = fix
        return fix

    def request_single_update(self) -> LocationRequest:
        request = LocationRequest(self.name)

        def worker():
            if request.cancelled():
                return
            try:
                fix = self.fetch()
            except LocationUnavailable as e:
                self.logger.warning(str(e))
                request.set_exception(e)
                return
            request.set_result(fix)

        threading.Thread(target=worker, name="ip-location", daemon=True).start()
        return request
