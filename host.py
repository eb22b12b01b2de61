import locale
import logging
import queue
import time
from typing import Callable, Optional

from clients.ip_location import IpLocationProvider
from clients.static_location import StaticLocationProvider
from models import DEFAULT_CRITERIA, ExtensionData, UpdateReason
from sunrise_extension import SunriseExtension
from utils.display_surface import DisplaySurface
from utils.location_manager import LocationManager
from utils.preferences import PreferenceStore


def locale_uses_24_hour() -> bool:
    """Whether the process locale formats times with a 24-hour clock."""
    try:
        locale.setlocale(locale.LC_TIME, "")
        fmt = locale.nl_langinfo(locale.T_FMT)
    except (locale.Error, AttributeError):
        return True
    if not fmt:
        return True
    return "%H" in fmt or "%T" in fmt or "%R" in fmt


def resolve_24_hour(setting) -> bool:
    if isinstance(setting, bool):
        return setting
    value = str(setting or "auto").strip().lower()
    if value in ("true", "yes", "on", "24"):
        return True
    if value in ("false", "no", "off", "12"):
        return False
    return locale_uses_24_hour()


class ExtensionHost:
    """
    Single-threaded host for the sunrise extension.

    Every call into the extension happens on the thread running `run()` or
    `run_once()`; location results produced on worker threads are posted to
    the host queue through `dispatch()` and executed there.
    """

    def __init__(self, config: dict, surface: DisplaySurface, preferences: PreferenceStore,
                 location_manager: LocationManager,
                 extension_factory: Callable[["ExtensionHost"], SunriseExtension],
                 monotonic: Callable[[], float] = time.monotonic):
        self.config = config
        self.logger = logging.getLogger("host")
        self.surface = surface
        self.preferences = preferences
        self.location_manager = location_manager
        self.monotonic = monotonic
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self.location_manager.set_dispatch(self.dispatch)
        self.extension = extension_factory(self)

        host_cfg = config.get("host", {})
        self.update_interval = float(host_cfg.get("update_interval_seconds", 1800))
        self.location_timeout = float(host_cfg.get("location_timeout_seconds", 30))
        self._prefs_mtime = self.preferences.mtime()

    @classmethod
    def from_config(cls, config: dict) -> "ExtensionHost":
        display_cfg = config.get("display", {})
        loc_cfg = config.get("location", {})
        surface = DisplaySurface(display_cfg.get("state_file", "sunrise_state.json"))
        preferences = PreferenceStore(config.get("preferences", {}).get("path", "preferences.yaml"))
        # static first so configured coordinates win over the IP lookup
        manager = LocationManager([
            StaticLocationProvider(config),
            IpLocationProvider(config),
        ])
        use_24_hour = resolve_24_hour(display_cfg.get("clock_24h", "auto"))

        def factory(host: "ExtensionHost") -> SunriseExtension:
            return SunriseExtension(
                location_manager=host.location_manager,
                preferences=host.preferences,
                publish=host.publish,
                criteria=DEFAULT_CRITERIA,
                timezone_name=loc_cfg.get("timezone"),
                use_24_hour=use_24_hour,
            )

        return cls(config, surface, preferences, manager, factory)

    def dispatch(self, fn: Callable[[], None]):
        """Queue `fn` to run on the host thread. Safe to call from any thread."""
        self._queue.put(fn)

    def publish(self, data: ExtensionData):
        self.surface.publish(data)

    def request_update(self, reason: UpdateReason):
        self.dispatch(lambda: self.extension.on_update_data(reason))

    def _run_safely(self, fn: Callable[[], None]):
        try:
            fn()
        except Exception:
            self.logger.exception("Error in update cycle; keeping previous display")

    def _drain(self):
        while True:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                return
            self._run_safely(fn)

    def _check_settings_changed(self):
        mtime = self.preferences.mtime()
        if mtime != self._prefs_mtime:
            self._prefs_mtime = mtime
            self.logger.info("Preferences changed; refreshing")
            self.request_update(UpdateReason.SETTINGS_CHANGED)

    def run_once(self, reason: UpdateReason = UpdateReason.MANUAL) -> Optional[ExtensionData]:
        """One full update cycle, including waiting for a fresh fix if one was requested."""
        published_before = self.surface.publish_count
        self.request_update(reason)
        self._drain()

        deadline = self.monotonic() + self.location_timeout
        while self.extension.has_pending_request or not self._queue.empty():
            remaining = deadline - self.monotonic()
            if remaining <= 0:
                self.logger.warning(f"No location fix within {self.location_timeout:.0f}s")
                break
            try:
                fn = self._queue.get(timeout=min(remaining, 0.5))
            except queue.Empty:
                continue
            self._run_safely(fn)
            self._drain()

        if self.surface.publish_count == published_before:
            return None
        return self.surface.last_data()

    def run(self, stop_event):
        self.logger.info(f"Host started (update every {self.update_interval:.0f}s)")
        self.request_update(UpdateReason.INITIAL)
        next_periodic = self.monotonic() + self.update_interval

        while not stop_event.is_set():
            timeout = max(0.0, min(next_periodic - self.monotonic(), 1.0))
            try:
                fn = self._queue.get(timeout=timeout)
            except queue.Empty:
                fn = None
            if fn is not None:
                self._run_safely(fn)

            if self.monotonic() >= next_periodic:
                self.request_update(UpdateReason.PERIODIC)
                next_periodic = self.monotonic() + self.update_interval
            self._check_settings_changed()

        self.extension.on_destroy()
        self.logger.info("Host stopped")
