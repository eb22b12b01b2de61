from datetime import date, datetime, timedelta

import pytest
import pytz

from day_event import compute_display_state, format_time, to_extension_data, update
from errors import UnsupportedLocationError
from models import DayEvent, GeoPoint, Preference, ICON_SUNRISE
from fakes import BERLIN, BERLIN_POINT, fixed_calc


def at(hour, minute=0, day=date(2024, 6, 1)):
    return BERLIN.localize(datetime(day.year, day.month, day.day, hour, minute))


def test_before_sunrise_shows_todays_sunrise():
    state = compute_display_state(at(4), fixed_calc())
    assert not state.show_sunset
    assert state.next_event is DayEvent.SUNRISE
    assert state.next_event_time == at(6, 5)


def test_daytime_shows_sunset():
    state = compute_display_state(at(12), fixed_calc())
    assert state.show_sunset
    assert state.next_event_time == at(21, 30)


def test_at_sunset_rolls_over_to_tomorrow():
    calls = []
    now = at(21, 30)
    state = compute_display_state(now, fixed_calc(calls=calls))
    assert calls == [date(2024, 6, 1), date(2024, 6, 2)]
    assert not state.show_sunset
    assert state.sunrise > now and state.sunset > now
    assert state.next_event_time == at(6, 5, day=date(2024, 6, 2))


def test_after_sunset_rolls_over_once():
    calls = []
    state = compute_display_state(at(23, 45), fixed_calc(calls=calls))
    assert len(calls) == 2
    assert state.next_event is DayEvent.SUNRISE
    assert state.sunset == at(21, 30, day=date(2024, 6, 2))


def test_identical_inputs_give_identical_state():
    calc = fixed_calc()
    assert compute_display_state(at(15), calc, 3, False) == compute_display_state(at(15), calc, 3, False)


def test_visible_inside_lead_window():
    now = at(20)  # 90 minutes before sunset
    assert compute_display_state(now, fixed_calc(), show_before_hours=2).visible


def test_hidden_outside_lead_window():
    now = at(18, 30)  # 3 hours before sunset
    assert not compute_display_state(now, fixed_calc(), show_before_hours=2).visible


def test_window_boundary_is_exclusive():
    now = at(19, 30)
    assert not compute_display_state(now, fixed_calc(), show_before_hours=2).visible
    assert compute_display_state(now + timedelta(seconds=1), fixed_calc(), show_before_hours=2).visible


def test_zero_hours_always_visible():
    state = compute_display_state(at(7), fixed_calc(), show_before_hours=0)
    assert state.visible


def test_24_hour_status():
    state = compute_display_state(at(4), fixed_calc(), use_24_hour=True)
    assert state.status_text == "06:05"


def test_12_hour_status():
    state = compute_display_state(at(4), fixed_calc(), use_24_hour=False)
    assert state.status_text == "6:05 AM"


def test_expanded_lines_name_next_event_first():
    state = compute_display_state(at(12), fixed_calc(), use_24_hour=False)
    assert state.expanded_title == "9:30 PM Sunset"
    assert state.expanded_body == "6:05 AM Sunrise"


def test_format_time_edges():
    assert format_time(at(0, 7), False) == "12:07 AM"
    assert format_time(at(12, 0), False) == "12:00 PM"
    assert format_time(at(0, 7), True) == "00:07"


def test_extension_data_uses_fixed_icon():
    data = to_extension_data(compute_display_state(at(12), fixed_calc()))
    assert data.icon == ICON_SUNRISE
    assert data.status == "21:30"
    assert data.visible


def test_berlin_midday_picks_sunset():
    state = update(at(12), BERLIN_POINT, Preference(), use_24_hour=True, tz=BERLIN)
    assert state.show_sunset
    assert state.next_event_time.hour == 21
    assert state.expanded_title.endswith(" Sunset")
    assert state.expanded_title.startswith(state.status_text)
    assert state.expanded_body.endswith(" Sunrise")
    assert state.sunrise < at(12) < state.sunset


def test_berlin_late_evening_next_sunrise_is_tomorrow():
    now = at(23, 30)
    state = update(now, BERLIN_POINT, Preference(), use_24_hour=True, tz=BERLIN)
    assert not state.show_sunset
    assert state.sunrise > now
    assert state.sunrise.date() == date(2024, 6, 2)


def test_utc_input_is_localised():
    now_utc = at(12).astimezone(pytz.utc)
    state = update(now_utc, BERLIN_POINT, Preference(), use_24_hour=True, tz=BERLIN)
    assert state.status_text.startswith("21:")


def test_polar_day_is_unsupported():
    svalbard = GeoPoint(78.22, 15.65)
    with pytest.raises(UnsupportedLocationError):
        update(at(12), svalbard, Preference(), use_24_hour=True, tz=BERLIN)


TRONDHEIM = GeoPoint(63.4305, 10.3951)
OSLO = pytz.timezone("Europe/Oslo")


def test_subarctic_midsummer_has_sunrise_and_sunset():
    # no civil dusk that night, but the sun still sets and rises
    now = OSLO.localize(datetime(2024, 6, 21, 12, 0))
    state = update(now, TRONDHEIM, Preference(), use_24_hour=True, tz=OSLO)
    assert state.show_sunset
    assert state.status_text.startswith("23:")
    assert state.expanded_body.startswith("03:")
    assert state.sunrise < now < state.sunset


def test_subarctic_midsummer_rolls_over_after_late_sunset():
    now = OSLO.localize(datetime(2024, 6, 21, 23, 50))
    state = update(now, TRONDHEIM, Preference(), use_24_hour=True, tz=OSLO)
    assert not state.show_sunset
    assert state.sunrise > now
    assert state.sunrise.date() == date(2024, 6, 22)
