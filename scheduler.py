"""
Fortnightly schedule resolution.

Medications either carry an explicit 14-day schedule (week A = entries 0-6,
week B = entries 7-13) or a simple per-category dosage that applies every day.
Which week is current is decided by the whole days elapsed since a fixed
epoch Monday, taken modulo 14.

Everything here is pure: no I/O, no module state, inputs are never mutated.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence, Union

from config import get_settings

logger = logging.getLogger(__name__)

CYCLE_DAYS = 14
WEEK_DAYS = 7
CATEGORIES = ("morning", "evening")

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _check_epoch(epoch: date) -> date:
    epoch = _as_date(epoch)
    if epoch.weekday() != 0:
        raise ValueError(f"Schedule epoch must be a Monday, got {epoch.isoformat()}")
    return epoch


def _check_category(category: str) -> str:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category '{category}', expected one of {CATEGORIES}")
    return category


def _default_epoch() -> date:
    return get_settings().schedule_epoch


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def days_elapsed(reference: DateLike, epoch: DateLike) -> int:
    """Whole days from epoch to reference; time of day is dropped."""
    return (_as_date(reference) - _as_date(epoch)).days


def cycle_position(reference: DateLike, epoch: DateLike) -> int:
    return days_elapsed(reference, epoch) % CYCLE_DAYS


def week_half(reference: DateLike, epoch: DateLike) -> int:
    return 0 if cycle_position(reference, epoch) < WEEK_DAYS else 1


def schedule_index(reference: DateLike, epoch: DateLike) -> int:
    """Position in a 14-entry schedule for the reference date (0..13)."""
    epoch = _check_epoch(epoch)
    return week_half(reference, epoch) * WEEK_DAYS + _as_date(reference).weekday()


def parse_dosage(value: Any) -> float:
    """Lenient dosage parse. Anything missing or unreadable counts as 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _day_flag(entry: Any, category: str) -> bool:
    if isinstance(entry, dict):
        return bool(entry.get(category))
    flag = getattr(entry, category, None)
    return bool(flag) if isinstance(flag, bool) else False


@dataclass(frozen=True)
class ExplicitSchedule:
    days: Sequence[Any]

    def is_due(self, category: str, index: int) -> bool:
        return _day_flag(self.days[index], category)


@dataclass(frozen=True)
class DailyDosage:
    morning: float = 0.0
    evening: float = 0.0

    def is_due(self, category: str, index: int) -> bool:
        return getattr(self, category) != 0


ScheduleSource = Union[ExplicitSchedule, DailyDosage]


def schedule_source(medication: Any) -> ScheduleSource:
    schedule = _field(medication, "schedule")
    if isinstance(schedule, (list, tuple)) and len(schedule) == CYCLE_DAYS:
        return ExplicitSchedule(tuple(schedule))
    if schedule is not None:
        logger.warning(
            "Ignoring malformed schedule for medication %r (expected %d entries, got %s); using daily dosage",
            _field(medication, "name"),
            CYCLE_DAYS,
            len(schedule) if isinstance(schedule, (list, tuple)) else type(schedule).__name__,
        )
    return DailyDosage(
        morning=parse_dosage(_field(medication, "morning_dosage")),
        evening=parse_dosage(_field(medication, "evening_dosage")),
    )


def is_due(medication: Any, category: str, index: int) -> bool:
    return schedule_source(medication).is_due(_check_category(category), index)


def resolve_due(
    medications: Iterable[Any],
    category: str,
    reference: Optional[DateLike] = None,
    epoch: Optional[DateLike] = None,
) -> List[Any]:
    """Medications due for ``category`` on ``reference`` (default today), in input order.

    Whether a dose was already taken is not considered here; see
    ``reminders.pending_reminders`` for that.
    """
    _check_category(category)
    if reference is None:
        reference = datetime.now()
    if epoch is None:
        epoch = _default_epoch()
    index = schedule_index(reference, epoch)
    return [m for m in medications if schedule_source(m).is_due(category, index)]
