#!/usr/bin/env python3
"""
Sunrise Monitor - Clean output of what the widget is currently showing
"""

import argparse
import time
import yaml
from datetime import datetime
from utils.display_surface import DisplaySurface


def format_line(record: dict) -> str:
    now = datetime.now().strftime("%H:%M:%S")
    shown = "Yes" if record.get("visible") else "No"
    status = record.get("status", "") if record.get("visible") else "--"
    return (f"{now}    {shown:<8} {status:<10} "
            f"{record.get('expanded_title', ''):<20} {record.get('expanded_body', '')}")


def monitor(config_path: str, interval: float):
    """Print a line whenever the published widget state changes"""

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    surface = DisplaySurface(config.get("display", {}).get("state_file", "sunrise_state.json"))

    print("🌅 Sunrise Widget Monitor")
    print("=" * 70)
    print("Time        Visible  Status     Next                 Then")
    print("-" * 70)

    last_seen = None
    try:
        while True:
            record = surface.last_published()
            if record is not None and record.get("published_at") != last_seen:
                last_seen = record.get("published_at")
                print(format_line(record))
            time.sleep(interval)
    except KeyboardInterrupt:
        print("\n👋 Monitor stopped")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Watch the sunrise widget's published state")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between checks")
    args = parser.parse_args()
    monitor(args.config, args.interval)
