"""Shared fixtures and record builders for cycle prediction tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.menstrual.config_loader import CycleConfig, load_cycle_config
from src.menstrual.records import PeriodRecord, SettingsRecord

# Canonical "today" for all prediction tests
TEST_DATE = date(2026, 2, 23)


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def make_period(start: date, end: date | None = None) -> PeriodRecord:
    return PeriodRecord(
        period_id=f"period_{start.isoformat()}",
        start_date=start,
        end_date=end,
    )


def build_history(
    latest_start: date,
    gaps: list[int],
    period_length: int | None = None,
) -> list[PeriodRecord]:
    """Build a most-recent-first history.

    ``gaps[i]`` is the number of days between record i and the older record
    i+1, so ``len(gaps) + 1`` records are returned.  When ``period_length``
    is given every record is closed with that inclusive length.
    """
    starts = [latest_start]
    for gap in gaps:
        starts.append(starts[-1] - timedelta(days=gap))
    return [
        make_period(
            s,
            s + timedelta(days=period_length - 1) if period_length else None,
        )
        for s in starts
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config."""
    return load_cycle_config()


@pytest.fixture
def default_settings() -> SettingsRecord:
    return SettingsRecord()
