"""
Dose windows and reminder reconciliation.

A reminder surfaces when the current moment falls inside a category's dose
window, the medication is due that day, and the category has not already been
marked as taken today.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from config import get_settings
from scheduler import CATEGORIES, DateLike, resolve_due

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MINUTES = 60


def parse_hhmm(value: str) -> time:
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time '{value}', expected HH:MM 24h format") from e


@dataclass(frozen=True)
class DoseWindow:
    category: str
    time: time
    window_minutes: int = DEFAULT_WINDOW_MINUTES

    def starts_at(self, day: date) -> datetime:
        return datetime.combine(day, self.time)

    def ends_at(self, day: date) -> datetime:
        return self.starts_at(day) + timedelta(minutes=self.window_minutes)

    def opened_on(self, moment: datetime) -> Optional[date]:
        """Day whose window contains ``moment``; a late window may run past midnight."""
        naive = moment.replace(tzinfo=None)
        for day in (naive.date(), naive.date() - timedelta(days=1)):
            if self.starts_at(day) <= naive < self.ends_at(day):
                return day
        return None

    def contains(self, moment: datetime) -> bool:
        return self.opened_on(moment) is not None


def default_windows(settings=None) -> List[DoseWindow]:
    if settings is None:
        settings = get_settings()
    return [
        DoseWindow("morning", parse_hhmm(settings.morning_time), settings.dose_window_minutes),
        DoseWindow("evening", parse_hhmm(settings.evening_time), settings.dose_window_minutes),
    ]


def active_window(moment: datetime, windows: Iterable[DoseWindow]) -> Optional[Tuple[str, date]]:
    """(category, dose day) for the window open at ``moment``, or None."""
    for window in windows:
        day = window.opened_on(moment)
        if day is not None:
            return window.category, day
    return None


def active_category(moment: datetime, windows: Iterable[DoseWindow]) -> Optional[str]:
    found = active_window(moment, windows)
    return found[0] if found else None


def taken_flags(intakes: Iterable[Mapping[str, Any]], day: date) -> Dict[str, bool]:
    """Per-category "already taken" flags for ``day`` built from intake records."""
    flags = {c: False for c in CATEGORIES}
    target = day.isoformat()
    for intake in intakes:
        if intake.get("date") != target:
            continue
        category = intake.get("category")
        if category in flags:
            flags[category] = True
        else:
            logger.warning("Skipping intake with unknown category %r", category)
    return flags


def pending_reminders(
    medications: Iterable[Any],
    category: str,
    taken: Mapping[str, bool],
    reference: Optional[DateLike] = None,
    epoch: Optional[DateLike] = None,
) -> List[Any]:
    due = resolve_due(medications, category, reference=reference, epoch=epoch)
    if taken.get(category):
        return []
    return due
