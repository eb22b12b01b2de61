#!/usr/bin/env python3
"""
Display surface - keeps the last data published by the extension in a JSON file
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from models import ExtensionData


class DisplaySurface:
    """Receives published ExtensionData and persists it for monitor.py and other readers"""

    def __init__(self, state_file: str = "sunrise_state.json"):
        self.state_file = Path(state_file)
        self.logger = logging.getLogger("display")
        self.publish_count = 0

    def publish(self, data: ExtensionData) -> bool:
        record = data.to_dict()
        record["published_at"] = datetime.now().astimezone().isoformat()
        try:
            with open(self.state_file, 'w') as f:
                json.dump(record, f, indent=2)
        except OSError as e:
            self.logger.error(f"Error saving display state: {e}")
            return False
        self.publish_count += 1

        if data.visible:
            self.logger.info(f"☀️ {data.status} | {data.expanded_title} | {data.expanded_body}")
        else:
            self.logger.info(f"Hidden until lead-time window opens (next: {data.expanded_title})")
        return True

    def last_published(self) -> Optional[dict]:
        """Last published record, or None if nothing readable has been published yet."""
        if not self.state_file.exists():
            return None
        try:
            with open(self.state_file, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading display state: {e}")
            return None

    def last_data(self) -> Optional[ExtensionData]:
        record = self.last_published()
        if record is None:
            return None
        return ExtensionData.from_dict(record)
