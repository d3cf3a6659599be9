"""Plain records consumed and produced by the cycle predictor.

Period and settings records come out of the repository; everything else in
this module is derived on every read and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum


class FlowIntensity(str, Enum):
    spotting = "spotting"
    light = "light"
    medium = "medium"
    heavy = "heavy"


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


class FertilityConfidence(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class InsightType(str, Enum):
    info = "info"
    tip = "tip"
    prediction = "prediction"
    reminder = "reminder"


DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5


@dataclass
class PeriodRecord:
    """A single logged period.

    Attributes:
        period_id:     Opaque identifier (``period_<start date>``).
        start_date:    First day of menstrual flow.
        end_date:      Last day of flow; None while the period is ongoing.
        flow_intensity_by_date: Flow logged per calendar day.
        notes:         Optional free text.
    """

    period_id: str
    start_date: date
    end_date: date | None = None
    flow_intensity_by_date: dict[date, FlowIntensity] = field(default_factory=dict)
    notes: str | None = None

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None


@dataclass
class SettingsRecord:
    """Per-user cycle settings, defaulted lazily on first read."""

    default_cycle_length: int = DEFAULT_CYCLE_LENGTH
    default_period_length: int = DEFAULT_PERIOD_LENGTH
    period_reminder_enabled: bool = True
    period_reminder_days: int = 2
    ovulation_reminder_enabled: bool = False


@dataclass(frozen=True)
class FertilityWindow:
    """Fertile days around the predicted ovulation date.

    ``confidence`` reflects how many periods have been logged, not a
    statistical interval.
    """

    fertile_start: date
    fertile_end: date
    ovulation_date: date
    confidence: FertilityConfidence

    def contains(self, day: date) -> bool:
        return self.fertile_start <= day <= self.fertile_end


@dataclass(frozen=True)
class CycleData:
    """Derived view of a user's current cycle."""

    current_cycle_day: int
    cycle_phase: CyclePhase
    next_period_date: date | None
    days_until_next_period: int | None
    last_period_start: date | None
    last_period_end: date | None
    average_cycle_length: int
    average_period_length: int
    cycle_count: int
    fertility_window: FertilityWindow | None
    is_on_period: bool


@dataclass(frozen=True)
class CycleHistoryEntry:
    cycle_number: int
    start_date: date
    end_date: date
    cycle_length: int
    period_length: int


@dataclass(frozen=True)
class DailyInsight:
    title: str
    message: str
    type: InsightType
    icon: str


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------


def days_between(earlier: date, later: date) -> int:
    """Whole days from ``earlier`` to ``later`` (negative if reversed)."""
    return (later - earlier).days


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)
