import threading
from datetime import datetime, timezone

from host import ExtensionHost, resolve_24_hour
from models import ExtensionData, ICON_SUNRISE, UpdateReason
from sunrise_extension import SunriseExtension
from utils.display_surface import DisplaySurface
from utils.location_manager import LocationManager
from utils.preferences import PreferenceStore
from fakes import FakeProvider, ThreadedProvider, berlin_fix

NOON_BERLIN = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


def make_host(tmp_path, provider, config=None):
    threads = []

    def factory(host):
        def publish(data):
            threads.append(threading.get_ident())
            host.publish(data)

        return SunriseExtension(
            location_manager=host.location_manager,
            preferences=host.preferences,
            publish=publish,
            timezone_name="Europe/Berlin",
            clock=lambda: NOON_BERLIN,
        )

    host = ExtensionHost(
        config or {"host": {"location_timeout_seconds": 5}},
        DisplaySurface(str(tmp_path / "state.json")),
        PreferenceStore(str(tmp_path / "prefs.yaml")),
        LocationManager([provider]),
        factory,
    )
    return host, threads


def test_run_once_waits_for_async_fix_on_host_thread(tmp_path):
    host, threads = make_host(tmp_path, ThreadedProvider(berlin_fix()))
    data = host.run_once()
    assert data is not None
    assert data.icon == ICON_SUNRISE
    assert data.expanded_title.endswith("Sunset")
    assert threads == [threading.get_ident()]
    assert not host.extension.has_pending_request


def test_run_once_gives_up_after_timeout(tmp_path):
    host, _ = make_host(tmp_path, FakeProvider(last_fix=None),
                        {"host": {"location_timeout_seconds": 0.2}})
    assert host.run_once() is None
    host.extension.on_destroy()
    assert not host.extension.has_pending_request


def test_run_once_without_provider_keeps_previous_state(tmp_path):
    host, _ = make_host(tmp_path, FakeProvider(enabled=False))
    previous = ExtensionData(True, ICON_SUNRISE, "05:00", "05:00 Sunrise", "21:00 Sunset")
    host.surface.publish(previous)
    assert host.run_once() is None
    assert host.surface.last_data() == previous


def test_run_stops_and_destroys(tmp_path):
    provider = FakeProvider(last_fix=None)
    host, _ = make_host(tmp_path, provider)
    stop = threading.Event()
    original_publish = host.surface.publish

    def publish_and_stop(data):
        original_publish(data)
        stop.set()

    host.surface.publish = publish_and_stop
    host.request_update(UpdateReason.MANUAL)
    worker = threading.Thread(target=lambda: host.run(stop))
    worker.start()
    # the INITIAL and MANUAL cycles each issue a request; only the latest stays registered
    for _ in range(50):
        if len(provider.requests) == 2:
            break
        threading.Event().wait(0.05)
    provider.requests[-1].set_result(berlin_fix())
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert provider.requests[0].cancelled()
    assert host.surface.last_data().expanded_title.endswith("Sunset")


def test_resolve_24_hour():
    assert resolve_24_hour(True) is True
    assert resolve_24_hour(False) is False
    assert resolve_24_hour("12") is False
    assert resolve_24_hour("true") is True
    assert isinstance(resolve_24_hour("auto"), bool)


def test_run_once_reports_nothing_when_state_cannot_be_saved(tmp_path):
    host, threads = make_host(tmp_path, ThreadedProvider(berlin_fix()))
    host.surface.state_file = tmp_path
    assert host.run_once() is None
    assert len(threads) == 1
