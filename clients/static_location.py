import logging
import time

from errors import ConfigError, LocationUnavailable
from models import Accuracy, GeoPoint, LocationFix, Power
from utils.location_manager import LocationProvider, LocationRequest


class StaticLocationProvider(LocationProvider):
    """Fixed coordinates from the `location` section of the config."""
    name = "static"
    power = Power.LOW
    accuracy = Accuracy.FINE

    def __init__(self, config: dict, monotonic=time.monotonic):
        self.logger = logging.getLogger("location.static")
        loc = config.get("location", {})
        self.latitude = loc.get("latitude")
        self.longitude = loc.get("longitude")
        self.timezone = loc.get("timezone")
        self._monotonic = monotonic
        if self.latitude is not None or self.longitude is not None:
            self._validate()

    def _validate(self):
        try:
            lat = float(self.latitude)
            lon = float(self.longitude)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid location: latitude={self.latitude!r} longitude={self.longitude!r}")
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise ConfigError(f"Location out of range: latitude={lat} longitude={lon}")
        self.latitude, self.longitude = lat, lon

    @property
    def enabled(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def get_last_known_location(self):
        if not self.enabled:
            self.logger.debug("Static location not configured")
            return None
        # configured coordinates are always current
        return LocationFix(
            point=GeoPoint(self.latitude, self.longitude),
            elapsed_realtime=self._monotonic(),
            provider=self.name,
            timezone=self.timezone,
        )

    def request_single_update(self) -> LocationRequest:
        request = LocationRequest(self.name)
        fix = self.get_last_known_location()
        if fix is None:
            request.set_exception(LocationUnavailable("Static location not configured"))
        else:
            request.set_result(fix)
        return request
