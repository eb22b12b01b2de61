import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

import day_event
from errors import ConfigError, LocationUnavailable, RequestCancelled, UnsupportedLocationError
from models import DEFAULT_CRITERIA, ExtensionData, LocationCriteria, LocationFix, UpdateReason
from utils.location_manager import LocationManager, LocationRequest
from utils.preferences import PreferenceStore, load_preference
from utils.sun_times import resolve_timezone

STALE_LOCATION_SECONDS = 10 * 60


class SunriseExtension:
    """
    Host-facing side of the sunrise widget. The host calls `on_update_data`
    for every update cycle and `on_destroy` on teardown; everything else is
    driven from here.
    """

    def __init__(
        self,
        location_manager: LocationManager,
        preferences: PreferenceStore,
        publish: Callable[[ExtensionData], None],
        criteria: LocationCriteria = DEFAULT_CRITERIA,
        timezone_name: Optional[str] = None,
        use_24_hour: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.logger = logging.getLogger("sunrise")
        self.location_manager = location_manager
        self.preferences = preferences
        self.publish = publish
        self.criteria = criteria
        self.timezone_name = timezone_name
        # fail at startup rather than on the first cycle
        self._tz = resolve_timezone(timezone_name) if timezone_name else None
        self.use_24_hour = use_24_hour
        self.clock = clock
        self.monotonic = monotonic
        self.pending_request: Optional[LocationRequest] = None
        self._last_delivered: Optional[LocationRequest] = None

    @property
    def has_pending_request(self) -> bool:
        return self.pending_request is not None

    def on_update_data(self, reason: UpdateReason = UpdateReason.UNKNOWN):
        self.logger.debug(f"Update requested (reason={UpdateReason(reason).name}, criteria={self.criteria})")
        provider = self.location_manager.get_best_provider(self.criteria, enabled_only=True)
        if not provider:
            self.logger.debug(f"No available location providers matching criteria. "
                              f"All providers: {self.location_manager.all_providers()}")
            return

        last = self.location_manager.get_last_known_location(provider)
        if last is None or (self.monotonic() - last.elapsed_realtime) >= STALE_LOCATION_SECONDS:
            self.logger.debug("Stale or missing last-known location; requesting single coarse location update.")
            self.disable_one_time_location_listener()
            request = self.location_manager.request_single_update(provider, self.on_location_changed)
            # providers with a fix at hand may deliver before returning
            if request is not self._last_delivered:
                self.pending_request = request
        else:
            self.publish_update(last)

    def on_location_changed(self, request: LocationRequest):
        self._last_delivered = request
        if self.pending_request is request:
            self.pending_request = None
        try:
            fix = request.result(timeout=0)
        except RequestCancelled:
            return
        except LocationUnavailable as e:
            self.logger.warning(f"Location update failed; keeping previous display: {e}")
            return
        self.publish_update(fix)

    def disable_one_time_location_listener(self):
        if self.pending_request is not None:
            self.location_manager.remove_updates(self.pending_request)
            self.pending_request = None

    def _timezone_for(self, fix: LocationFix):
        if self._tz is not None:
            return self._tz
        if fix.timezone:
            try:
                return resolve_timezone(fix.timezone)
            except ConfigError:
                self.logger.warning(f"Provider {fix.provider} reported unknown timezone {fix.timezone!r}; using UTC")
        return resolve_timezone("UTC")

    def publish_update(self, fix: LocationFix) -> Optional[ExtensionData]:
        self.preferences.reload()
        preference = load_preference(self.preferences)
        try:
            state = day_event.update(
                self.clock(),
                fix.point,
                preference,
                use_24_hour=self.use_24_hour,
                tz=self._timezone_for(fix),
            )
        except UnsupportedLocationError as e:
            self.logger.warning(f"Not publishing: {e}")
            return None

        self.logger.debug(f"show sunset: {state.show_sunset} visible: {state.visible} "
                          f"(show before {preference.show_before_hours}h)")
        data = day_event.to_extension_data(state)
        self.publish(data)
        return data

    def on_destroy(self):
        self.disable_one_time_location_listener()
        self.logger.debug("Sunrise extension destroyed")
