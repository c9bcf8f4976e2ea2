# alerting/preferences.py
# persisted user preferences and the emergency contact.

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from imu_detection.sensitivity import DEFAULT_LEVEL, sensitivity_factor

logger = logging.getLogger(__name__)

DEFAULT_PATH = "config.json"

# Optional leading +, then 10-15 digits
PHONE_PATTERN = re.compile(r"^[+]?[0-9]{10,15}$")


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone or ""))


@dataclass
class Preferences:
    contact_phone: str = "" # emergency contact, empty until one is saved
    sms_enabled: bool = True
    sound_enabled: bool = True
    vibration_enabled: bool = True
    sensitivity: int = DEFAULT_LEVEL # 0-100, applied to the detector thresholds

    @property
    def has_contact(self) -> bool:
        return bool(self.contact_phone)


class PreferenceStore:
    """
    Loads and saves Preferences as a JSON file.

    The path comes from the FALL_PREFS_PATH variable (read through .env if
    present), else config.json in the working directory. A missing or
    unreadable file gives default preferences rather than an error.
    """

    def __init__(self, path: str | os.PathLike | None = None, dotenv_path: str | None = None):
        if path is None:
            load_dotenv(dotenv_path=dotenv_path)
            path = os.environ.get("FALL_PREFS_PATH", DEFAULT_PATH)
        self.path = Path(path)

    def load(self) -> Preferences:
        if not self.path.exists():
            return Preferences()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read preferences from %s: %s", self.path, exc)
            return Preferences()
        if not isinstance(data, dict):
            return Preferences()

        known = {f.name for f in fields(Preferences)}
        prefs = Preferences(**{k: v for k, v in data.items() if k in known})
        try:
            sensitivity_factor(prefs.sensitivity)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid stored sensitivity %r", prefs.sensitivity)
            prefs.sensitivity = DEFAULT_LEVEL
        return prefs

    def save(self, prefs: Preferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(asdict(prefs), f, indent=2)

    # ── Convenience setters (load → change → save) ───────────────────────────

    def save_contact(self, phone: str) -> Preferences:
        phone = (phone or "").strip()
        if not is_valid_phone(phone):
            raise ValueError("Enter a valid phone number")
        prefs = self.load()
        prefs.contact_phone = phone
        self.save(prefs)
        logger.info("Emergency contact saved")
        return prefs

    def set_sensitivity(self, level: int) -> Preferences:
        sensitivity_factor(level)  # raises ValueError when out of range
        prefs = self.load()
        prefs.sensitivity = int(level)
        self.save(prefs)
        return prefs

    def set_flag(self, name: str, enabled: bool) -> Preferences:
        """Toggle one of sms_enabled / sound_enabled / vibration_enabled."""
        if name not in ("sms_enabled", "sound_enabled", "vibration_enabled"):
            raise ValueError(f"Unknown preference flag: '{name}'")
        prefs = self.load()
        setattr(prefs, name, bool(enabled))
        self.save(prefs)
        return prefs
