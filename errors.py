class SunriseError(Exception):
    """Base class for errors raised by the sunrise extension."""
    pass


class ConfigError(SunriseError):
    """Raised when a configuration value cannot be used."""
    pass


class UnsupportedLocationError(SunriseError):
    """Raised when the sun does not rise or set on the requested day (polar regions)."""
    pass


class LocationUnavailable(SunriseError):
    """Raised when a provider could not produce a location fix."""
    pass


class RequestCancelled(SunriseError):
    """Raised when the result of a cancelled location request is read."""
    pass
