#!/usr/bin/env python3
"""
User preferences for the sunrise extension, kept as string values in a YAML file
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from models import Preference

logger = logging.getLogger("preferences")

PREF_SHOW_BEFORE_HOURS = "pref_sunrise_show_before_hours"
DEFAULT_SHOW_BEFORE_HOURS = 0

# (value, summary) pairs offered by the settings command
SHOW_BEFORE_HOURS_CHOICES: List[Tuple[str, str]] = [
    ("0", "Always"),
    ("1", "1 hour before"),
    ("2", "2 hours before"),
    ("3", "3 hours before"),
    ("4", "4 hours before"),
    ("6", "6 hours before"),
    ("8", "8 hours before"),
    ("12", "12 hours before"),
]


class PreferenceStore:
    """String-keyed preference storage backed by a YAML mapping"""

    def __init__(self, path: str = "preferences.yaml"):
        self.path = Path(path)
        self._values: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read preferences from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences file {self.path}: not a mapping")
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self):
        with open(self.path, 'w') as f:
            yaml.safe_dump(self._values, f, default_flow_style=False)

    def reload(self):
        self._values = self._load()

    def mtime(self) -> Optional[float]:
        try:
            return os.path.getmtime(self.path)
        except OSError:
            return None

    def keys(self) -> List[str]:
        return sorted(self._values)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def set_string(self, key: str, value: str):
        self._values[key] = str(value)
        self._save()
        logger.info(f"Saved preference {key}={value}")


def parse_show_before_hours(raw: Optional[str]) -> int:
    """Lead-time hours from their stored string form; anything unusable means 0."""
    if raw is None or str(raw).strip() == "":
        return DEFAULT_SHOW_BEFORE_HOURS
    try:
        hours = int(str(raw).strip())
    except ValueError:
        logger.warning(f"Unparsable {PREF_SHOW_BEFORE_HOURS}={raw!r}; using {DEFAULT_SHOW_BEFORE_HOURS}")
        return DEFAULT_SHOW_BEFORE_HOURS
    if hours < 0:
        logger.warning(f"Negative {PREF_SHOW_BEFORE_HOURS}={hours}; using {DEFAULT_SHOW_BEFORE_HOURS}")
        return DEFAULT_SHOW_BEFORE_HOURS
    return hours


def load_preference(store: PreferenceStore) -> Preference:
    raw = store.get_string(PREF_SHOW_BEFORE_HOURS)
    return Preference(show_before_hours=parse_show_before_hours(raw))


def summary_for(value: str) -> Optional[str]:
    """Human summary of a show-before value, None if it is not one of the offered choices."""
    for choice, summary in SHOW_BEFORE_HOURS_CHOICES:
        if choice == value:
            return summary
    return None
