#!/usr/bin/env python3
"""
Sunrise settings - show or change the widget's preferences
"""

import argparse
import sys
import yaml

from utils.preferences import (
    PREF_SHOW_BEFORE_HOURS,
    SHOW_BEFORE_HOURS_CHOICES,
    PreferenceStore,
    parse_show_before_hours,
    summary_for,
)


def show(store: PreferenceStore):
    raw = store.get_string(PREF_SHOW_BEFORE_HOURS, "0")
    hours = parse_show_before_hours(raw)
    summary = summary_for(str(hours)) or f"{hours} hours before"
    print(f"Show before event: {summary}")


def set_show_before(store: PreferenceStore, value: str) -> bool:
    if summary_for(value) is None:
        choices = ", ".join(v for v, _ in SHOW_BEFORE_HOURS_CHOICES)
        print(f"❌ Invalid value '{value}'. Choose one of: {choices}")
        return False
    store.set_string(PREF_SHOW_BEFORE_HOURS, value)
    print(f"✅ Show before event: {summary_for(value)}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Sunrise widget settings")
    parser.add_argument("--config", default="config.yaml")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("show", help="Show current settings")
    sb = sub.add_parser("show-before-hours", help="Only show the widget this many hours before the event")
    sb.add_argument("hours", help="0 means always")
    sub.add_parser("choices", help="List the offered show-before values")
    args = parser.parse_args()

    try:
        with open(args.config, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        config = {}
    store = PreferenceStore(config.get("preferences", {}).get("path", "preferences.yaml"))

    if args.command == "show-before-hours":
        if not set_show_before(store, args.hours.strip()):
            sys.exit(1)
    elif args.command == "choices":
        for value, summary in SHOW_BEFORE_HOURS_CHOICES:
            print(f"{value:>3}  {summary}")
    else:
        show(store)


if __name__ == "__main__":
    main()
