from datetime import date
import logging
from typing import Callable

import pytz
from astral import LocationInfo
from astral.sun import sunrise, sunset

from errors import ConfigError, UnsupportedLocationError
from models import GeoPoint, SolarDay

logger = logging.getLogger("sun_times")


def resolve_timezone(name: str):
    """Return the pytz timezone for an IANA name."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ConfigError(f"Unknown timezone: {name}")


def solar_day(point: GeoPoint, day: date, tz) -> SolarDay:
    """Official sunrise and sunset for `day` at `point`, in `tz`."""
    loc = LocationInfo(latitude=point.latitude, longitude=point.longitude)
    try:
        rise = sunrise(loc.observer, day, tzinfo=tz)
        set_ = sunset(loc.observer, day, tzinfo=tz)
    except ValueError as e:
        # astral raises when the sun stays above or below the horizon all day
        raise UnsupportedLocationError(
            f"No sunrise/sunset at ({point.latitude:.4f}, {point.longitude:.4f}) on {day}: {e}"
        )
    logger.debug(f"Solar day {day} at ({point.latitude:.4f}, {point.longitude:.4f}): "
                 f"sunrise {rise.isoformat()} sunset {set_.isoformat()}")
    return SolarDay(sunrise=rise, sunset=set_)


def calculator_for(point: GeoPoint, tz) -> Callable[[date], SolarDay]:
    """Bind a location and timezone so callers only pass the calendar date."""
    def calc(day: date) -> SolarDay:
        return solar_day(point, day, tz)
    return calc
