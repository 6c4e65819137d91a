from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeGate:
    """Operating-hours window over the local wall-clock hour: ``start_hour <= hour < end_hour``."""

    start_hour: int = 9
    end_hour: int = 18

    def is_open(self, now: datetime | None = None) -> bool:
        hour = (now or datetime.now()).hour
        return self.start_hour <= hour < self.end_hour

    def describe(self) -> str:
        return f'{self.start_hour:02d}:00-{self.end_hour:02d}:00'
