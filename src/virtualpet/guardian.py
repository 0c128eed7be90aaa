from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .pet import Pet

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "1234"


@dataclass
class GuardianLedger:
    """Parental controls: an allowed-hours window, play-time stats and revival.

    Play durations are in milliseconds. The window is ``[start, end)`` in
    24-hour clock hours and only applies while ``limitations_enabled``.
    """

    password: str = DEFAULT_PASSWORD
    limitations_enabled: bool = False
    allowed_start_hour: int = 0
    allowed_end_hour: int = 24
    total_play_time: int = 0
    session_count: int = 0

    def authenticate(self, attempt: str) -> bool:
        return attempt == self.password

    def is_play_allowed(self, now_hour: Optional[int] = None) -> bool:
        if not self.limitations_enabled:
            return True
        hour = datetime.now().hour if now_hour is None else now_hour
        return self.allowed_start_hour <= hour < self.allowed_end_hour

    def set_play_time_window(self, start_hour: int, end_hour: int) -> None:
        if not (0 <= start_hour <= 24 and 0 <= end_hour <= 24):
            raise ValueError("hours must be between 0 and 24")
        self.allowed_start_hour = start_hour
        self.allowed_end_hour = end_hour
        logger.info("Play window set to %02d:00-%02d:00", start_hour, end_hour)

    def set_limitations_enabled(self, enabled: bool) -> None:
        self.limitations_enabled = bool(enabled)

    def reset_play_time_restrictions(self) -> None:
        self.limitations_enabled = False
        self.allowed_start_hour = 0
        self.allowed_end_hour = 24

    @property
    def average_play_time(self) -> int:
        return 0 if self.session_count == 0 else self.total_play_time // self.session_count

    def update_after_session(self, session_duration: int) -> None:
        if session_duration < 0:
            raise ValueError("session_duration cannot be negative")
        self.total_play_time += session_duration
        self.session_count += 1
        logger.debug("Session recorded: %d ms (sessions=%d)", session_duration, self.session_count)

    def reset_stats(self) -> None:
        self.total_play_time = 0
        self.session_count = 0

    def revive_pet(self, pet: Pet) -> bool:
        """Bring a dead pet back at full stats. Living pets are left alone."""
        if not pet.is_dead:
            return False
        pet.reset_state()
        logger.info("Revived %s", pet.name)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuardianLedger":
        defaults = cls()
        return cls(
            password=str(data.get("password", defaults.password)),
            limitations_enabled=bool(data.get("limitations_enabled", defaults.limitations_enabled)),
            allowed_start_hour=int(data.get("allowed_start_hour", defaults.allowed_start_hour)),
            allowed_end_hour=int(data.get("allowed_end_hour", defaults.allowed_end_hour)),
            total_play_time=int(data.get("total_play_time", defaults.total_play_time)),
            session_count=int(data.get("session_count", defaults.session_count)),
        )


class GuardianStore:
    """Reads and writes the guardian ledger as its own small JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> GuardianLedger:
        if not self.path.exists():
            logger.info("Guardian file not found at %s; using defaults", self.path)
            return GuardianLedger()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return GuardianLedger.from_dict(data if isinstance(data, dict) else {})
        except (OSError, ValueError, TypeError) as exc:
            logger.error("Failed to read guardian file %s: %s", self.path, exc)
            return GuardianLedger()

    def save(self, ledger: GuardianLedger) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(ledger.to_dict(), f, indent=2, sort_keys=True)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)
        logger.debug("Guardian ledger written to %s", self.path)
