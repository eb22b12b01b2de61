"""Value types shared by the selector, the location layer and the host."""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional

ICON_SUNRISE = "ic_sunrise"


class DayEvent(Enum):
    SUNRISE = "Sunrise"
    SUNSET = "Sunset"

    @property
    def label(self) -> str:
        return self.value


class UpdateReason(IntEnum):
    """Why the host asked the extension for fresh data."""
    UNKNOWN = 0
    INITIAL = 1
    PERIODIC = 2
    SETTINGS_CHANGED = 3
    CONTENT_CHANGED = 4
    SCREEN_ON = 5
    MANUAL = 6


class Power(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Accuracy(IntEnum):
    FINE = 1
    COARSE = 2


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class SolarDay:
    """Sunrise and sunset of one local calendar day."""
    sunrise: datetime
    sunset: datetime


@dataclass(frozen=True)
class Preference:
    show_before_hours: int = 0


@dataclass(frozen=True)
class LocationCriteria:
    """What the extension needs from a location provider."""
    power: Power = Power.LOW
    accuracy: Accuracy = Accuracy.COARSE
    cost_allowed: bool = False


DEFAULT_CRITERIA = LocationCriteria()


@dataclass(frozen=True)
class LocationFix:
    point: GeoPoint
    elapsed_realtime: float  # time.monotonic() when the fix was taken
    provider: str
    timezone: Optional[str] = None


@dataclass(frozen=True)
class DisplayState:
    visible: bool
    next_event: DayEvent
    next_event_time: datetime
    status_text: str
    expanded_title: str
    expanded_body: str
    sunrise: datetime
    sunset: datetime

    @property
    def show_sunset(self) -> bool:
        return self.next_event is DayEvent.SUNSET


@dataclass(frozen=True)
class ExtensionData:
    """What gets handed to the host's display surface."""
    visible: bool
    icon: str
    status: str
    expanded_title: str
    expanded_body: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ExtensionData":
        return cls(
            visible=bool(data.get("visible", False)),
            icon=data.get("icon", ICON_SUNRISE),
            status=data.get("status", ""),
            expanded_title=data.get("expanded_title", ""),
            expanded_body=data.get("expanded_body", ""),
        )
