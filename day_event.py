"""
Day-event selection: which of sunrise/sunset comes next, how to show it, and whether to show it at all
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable

from models import DayEvent, DisplayState, ExtensionData, GeoPoint, Preference, SolarDay, ICON_SUNRISE
from utils.sun_times import calculator_for

logger = logging.getLogger("day_event")

EXPANDED_TITLE_TEMPLATE = "{time} {label}"


def format_time(t: datetime, use_24_hour: bool) -> str:
    """HH:mm in 24-hour mode, h:mm a otherwise."""
    if use_24_hour:
        return f"{t.hour:02d}:{t.minute:02d}"
    meridiem = "AM" if t.hour < 12 else "PM"
    return f"{t.hour % 12 or 12}:{t.minute:02d} {meridiem}"


def expanded_line(formatted_time: str, event: DayEvent) -> str:
    return EXPANDED_TITLE_TEMPLATE.format(time=formatted_time, label=event.label)


def compute_display_state(
    now: datetime,
    calc: Callable[[date], SolarDay],
    show_before_hours: int = 0,
    use_24_hour: bool = True,
) -> DisplayState:
    """
    Work out the next sunrise or sunset relative to `now`.

    `calc` maps a calendar date to that day's SolarDay. Once `now` has reached
    today's sunset the reference day moves to tomorrow, so both events are
    always upcoming or in progress, never stale.
    """
    day = calc(now.date())
    if now >= day.sunset:
        day = calc(now.date() + timedelta(days=1))

    sunrise, sunset = day.sunrise, day.sunset
    is_before_sunrise = now < sunrise
    is_before_sunset = now < sunset
    show_sunset = (not is_before_sunrise) and is_before_sunset

    next_event = DayEvent.SUNSET if show_sunset else DayEvent.SUNRISE
    other_event = DayEvent.SUNRISE if show_sunset else DayEvent.SUNSET
    next_event_time = sunset if show_sunset else sunrise

    # calc already returns times in the location's zone
    formatted = {
        DayEvent.SUNRISE: format_time(sunrise, use_24_hour),
        DayEvent.SUNSET: format_time(sunset, use_24_hour),
    }

    if show_before_hours == 0:
        visible = True
    else:
        visible = (next_event_time - now) < timedelta(hours=show_before_hours)

    return DisplayState(
        visible=visible,
        next_event=next_event,
        next_event_time=next_event_time,
        status_text=formatted[next_event],
        expanded_title=expanded_line(formatted[next_event], next_event),
        expanded_body=expanded_line(formatted[other_event], other_event),
        sunrise=sunrise,
        sunset=sunset,
    )


def update(
    now: datetime,
    location: GeoPoint,
    preferences: Preference,
    use_24_hour: bool,
    tz,
) -> DisplayState:
    """Entry point used by the extension adapter for one update cycle."""
    local_now = now.astimezone(tz)
    state = compute_display_state(
        local_now,
        calculator_for(location, tz),
        show_before_hours=max(0, preferences.show_before_hours),
        use_24_hour=use_24_hour,
    )
    logger.debug(f"now={local_now.isoformat()} sunrise={state.sunrise.isoformat()} "
                 f"sunset={state.sunset.isoformat()} next={state.next_event.label} "
                 f"visible={state.visible}")
    return state


def to_extension_data(state: DisplayState) -> ExtensionData:
    return ExtensionData(
        visible=state.visible,
        icon=ICON_SUNRISE,
        status=state.status_text,
        expanded_title=state.expanded_title,
        expanded_body=state.expanded_body,
    )
