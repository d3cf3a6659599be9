"""Cycle prediction from logged period history.

Pure functions over plain records: nothing here touches the database or
reads the wall clock.  Callers pass ``today`` explicitly, which keeps every
result reproducible for a given input.

Predictions use calendar averaging only:
- cycle length  = mean gap between consecutive period starts (<= 45 days)
- period length = mean inclusive start..end span (<= 10 days)
- ovulation     = a fixed 14-day luteal tail before the next period
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date, datetime

from src.menstrual.config_loader import CycleConfig
from src.menstrual.records import (
    CycleData,
    CycleHistoryEntry,
    CyclePhase,
    FertilityConfidence,
    FertilityWindow,
    PeriodRecord,
    SettingsRecord,
    add_days,
    days_between,
)

logger = logging.getLogger("luna.menstrual.cycle_predictor")

_DEFAULT_CONFIG = CycleConfig()


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; 28.5 must become 29.
    return math.floor(value + 0.5)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def cycle_length_samples(
    history: Sequence[PeriodRecord], config: CycleConfig | None = None
) -> list[int]:
    """Return the accepted cycle lengths between consecutive period starts.

    Args:
        history: Period records, most recent first.
        config:  Tunables; defaults to the bundled values.

    Returns:
        Gap lengths in days with ``0 < length <= max_cycle_sample_days``.
    """
    cfg = config or _DEFAULT_CONFIG
    samples: list[int] = []
    for newer, older in zip(history, history[1:]):
        length = days_between(older.start_date, newer.start_date)
        if 0 < length <= cfg.max_cycle_sample_days:
            samples.append(length)
        else:
            logger.debug(
                "Ignoring cycle gap of %d days between %s and %s",
                length, older.start_date, newer.start_date,
            )
    return samples


def period_length_samples(
    history: Sequence[PeriodRecord], config: CycleConfig | None = None
) -> list[int]:
    """Return the accepted inclusive period lengths of closed periods."""
    cfg = config or _DEFAULT_CONFIG
    samples: list[int] = []
    for record in history:
        if record.end_date is None:
            continue
        length = days_between(record.start_date, record.end_date) + 1
        if 0 < length <= cfg.max_period_sample_days:
            samples.append(length)
    return samples


def _average_or_default(samples: list[int], default: int) -> int:
    if not samples:
        return default
    return _round_half_up(sum(samples) / len(samples))


def determine_cycle_phase(
    cycle_day: int,
    cycle_length: int,
    period_length: int,
    is_on_period: bool,
    config: CycleConfig | None = None,
) -> CyclePhase:
    """Classify a cycle day into a phase.

    The ovulation day sits ``luteal_days`` before the end of the cycle and
    the ovulation phase spans ``ovulation_half_window_days`` either side of
    it.  For cycles shorter than about 16 days the follicular phase is empty
    unless ``clamp_short_cycles`` is enabled, in which case the ovulation day
    is pushed to at least ``period_length + min_follicular_days``.

    Args:
        cycle_day:     1-indexed day of the current cycle.
        cycle_length:  Expected cycle length in days.
        period_length: Expected period length in days.
        is_on_period:  True while an open period is being reported.
        config:        Tunables; defaults to the bundled values.

    Returns:
        The phase for ``cycle_day``.
    """
    cfg = config or _DEFAULT_CONFIG
    if is_on_period or cycle_day <= period_length:
        return CyclePhase.menstrual

    ovulation_day = cycle_length - cfg.luteal_days
    if cfg.clamp_short_cycles:
        ovulation_day = max(period_length + cfg.min_follicular_days, ovulation_day)

    if cycle_day <= ovulation_day - cfg.ovulation_half_window_days:
        return CyclePhase.follicular
    if cycle_day <= ovulation_day + cfg.ovulation_half_window_days:
        return CyclePhase.ovulation
    return CyclePhase.luteal


def fertility_confidence(
    cycle_count: int, config: CycleConfig | None = None
) -> FertilityConfidence:
    cfg = config or _DEFAULT_CONFIG
    if cycle_count >= cfg.high_confidence_cycles:
        return FertilityConfidence.high
    if cycle_count >= cfg.medium_confidence_cycles:
        return FertilityConfidence.medium
    return FertilityConfidence.low


def calculate_fertility_window(
    last_start: date,
    cycle_length: int,
    cycle_count: int,
    config: CycleConfig | None = None,
) -> FertilityWindow | None:
    """Predict the fertile window of the current cycle.

    Args:
        last_start:   Start date of the most recent period.
        cycle_length: Expected cycle length in days.
        cycle_count:  Number of logged periods.
        config:       Tunables; defaults to the bundled values.

    Returns:
        FertilityWindow, or None when nothing has been logged.
    """
    cfg = config or _DEFAULT_CONFIG
    if cycle_count < 1:
        return None

    ovulation_date = add_days(last_start, cycle_length - cfg.luteal_days)
    return FertilityWindow(
        fertile_start=add_days(ovulation_date, -cfg.fertile_days_before),
        fertile_end=add_days(ovulation_date, cfg.fertile_days_after),
        ovulation_date=ovulation_date,
        confidence=fertility_confidence(cycle_count, cfg),
    )


def empty_cycle_data(settings: SettingsRecord) -> CycleData:
    """Neutral view for a user who has not logged a period yet."""
    return CycleData(
        current_cycle_day=0,
        cycle_phase=CyclePhase.follicular,
        next_period_date=None,
        days_until_next_period=None,
        last_period_start=None,
        last_period_end=None,
        average_cycle_length=settings.default_cycle_length,
        average_period_length=settings.default_period_length,
        cycle_count=0,
        fertility_window=None,
        is_on_period=False,
    )


def compute_cycle_data(
    history: Sequence[PeriodRecord],
    settings: SettingsRecord,
    today: date | datetime,
    config: CycleConfig | None = None,
) -> CycleData:
    """Derive the current cycle view from period history.

    Args:
        history:  Period records sorted by start date, most recent first.
        settings: The user's settings; supplies fallback lengths.
        today:    Reference date.  Datetimes are truncated to their date.
        config:   Tunables; defaults to the bundled values.

    Returns:
        CycleData for ``today``.
    """
    cfg = config or _DEFAULT_CONFIG
    today = _as_date(today)

    if not history:
        return empty_cycle_data(settings)

    average_cycle_length = _average_or_default(
        cycle_length_samples(history, cfg), settings.default_cycle_length
    )
    average_period_length = _average_or_default(
        period_length_samples(history, cfg), settings.default_period_length
    )

    last = history[0]
    days_since_start = days_between(last.start_date, today)
    is_on_period = (
        last.end_date is None and days_since_start < cfg.open_period_ceiling_days
    )
    # Future-dated starts are a logging error; never report a negative day.
    current_cycle_day = max(0, days_since_start + 1)

    next_period_date = add_days(last.start_date, average_cycle_length)
    days_until_next_period = max(0, days_between(today, next_period_date))

    cycle_phase = determine_cycle_phase(
        current_cycle_day,
        average_cycle_length,
        average_period_length,
        is_on_period,
        cfg,
    )

    return CycleData(
        current_cycle_day=current_cycle_day,
        cycle_phase=cycle_phase,
        next_period_date=next_period_date,
        days_until_next_period=days_until_next_period,
        last_period_start=last.start_date,
        last_period_end=last.end_date,
        average_cycle_length=average_cycle_length,
        average_period_length=average_period_length,
        cycle_count=len(history),
        fertility_window=calculate_fertility_window(
            last.start_date, average_cycle_length, len(history), cfg
        ),
        is_on_period=is_on_period,
    )


def compute_cycle_history(history: Sequence[PeriodRecord]) -> list[CycleHistoryEntry]:
    """List completed cycles with their raw lengths.

    No outlier filtering is applied so anomalies stay visible.  The oldest
    record only closes the cycle after it and gets no entry of its own.

    Args:
        history: Period records, most recent first.

    Returns:
        One entry per adjacent pair, in the same order as ``history``.
        ``cycle_number`` counts up from the oldest cycle.
    """
    entries: list[CycleHistoryEntry] = []
    total = len(history)
    for i, (record, previous) in enumerate(zip(history, history[1:])):
        period_length = (
            days_between(record.start_date, record.end_date) + 1
            if record.end_date is not None
            else 0
        )
        entries.append(
            CycleHistoryEntry(
                cycle_number=total - i,
                start_date=record.start_date,
                end_date=record.end_date or record.start_date,
                cycle_length=days_between(previous.start_date, record.start_date),
                period_length=period_length,
            )
        )
    return entries
