"""
Schedule data model
"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, Optional


TIME_FORMAT = "%H:%M"


def parse_time_of_day(value: Any) -> Optional[time]:
    """
    Parse an "HH:MM" string into a time, truncated to the minute.

    Empty values mean "not set" and return None. Malformed values raise ValueError.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, int):
        # YAML 1.1 reads unquoted 08:30 as a sexagesimal integer (minutes)
        hours, minutes = divmod(value, 60)
        return time(hour=hours % 24, minute=minutes)
    text = str(value).strip()
    if not text:
        return None
    return datetime.strptime(text[:5], TIME_FORMAT).time()


@dataclass(frozen=True)
class ScheduleEntry:
    """One configured start/stop pair; either side may be unset."""

    start: Optional[time] = None
    stop: Optional[time] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleEntry":
        return cls(
            start=parse_time_of_day(data.get("start")),
            stop=parse_time_of_day(data.get("stop")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.strftime(TIME_FORMAT) if self.start else "",
            "stop": self.stop.strftime(TIME_FORMAT) if self.stop else "",
        }

    def starts_at(self, minute: str) -> bool:
        return self.start is not None and self.start.strftime(TIME_FORMAT) == minute

    def stops_at(self, minute: str) -> bool:
        return self.stop is not None and self.stop.strftime(TIME_FORMAT) == minute
