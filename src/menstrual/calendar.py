"""Month calendar view of logged and predicted cycle days.

Builds the 6x7 grid a month view renders: Sunday-first weeks, padded with
the tail of the previous month and the head of the next.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import date

from src.menstrual.records import CycleData, PeriodRecord, add_days

GRID_DAYS = 42


@dataclass(frozen=True)
class CalendarDay:
    """Flags for a single calendar cell.

    Attributes:
        day:                 The calendar date.
        in_month:            False for padding days from adjacent months.
        is_today:            True for the reference date.
        is_period:           A logged period covers this day.  Open periods
                             run up to and including today.
        is_predicted_period: Inside the predicted next period.
        is_fertile:          Inside the predicted fertile window.
        is_ovulation:        The predicted ovulation date.
        has_symptoms:        Symptoms were logged for this day.
    """

    day: date
    in_month: bool
    is_today: bool
    is_period: bool
    is_predicted_period: bool
    is_fertile: bool
    is_ovulation: bool
    has_symptoms: bool


def is_logged_period_day(day: date, history: Sequence[PeriodRecord], today: date) -> bool:
    return any(
        record.start_date <= day <= (record.end_date or today) for record in history
    )


def is_predicted_period_day(day: date, cycle_data: CycleData) -> bool:
    if cycle_data.next_period_date is None:
        return False
    predicted_end = add_days(
        cycle_data.next_period_date, cycle_data.average_period_length - 1
    )
    return cycle_data.next_period_date <= day <= predicted_end


def classify_day(
    day: date,
    history: Sequence[PeriodRecord],
    cycle_data: CycleData,
    symptom_dates: Collection[date],
    today: date,
    in_month: bool = True,
) -> CalendarDay:
    """Compute the calendar flags for one day."""
    window = cycle_data.fertility_window
    return CalendarDay(
        day=day,
        in_month=in_month,
        is_today=day == today,
        is_period=is_logged_period_day(day, history, today),
        is_predicted_period=is_predicted_period_day(day, cycle_data),
        is_fertile=window is not None and window.contains(day),
        is_ovulation=window is not None and window.ovulation_date == day,
        has_symptoms=day in symptom_dates,
    )


def grid_dates(year: int, month: int) -> list[date]:
    """Return the 42 dates shown for a month, Sunday-first.

    Raises:
        ValueError: If ``month`` is outside 1..12.
    """
    first = date(year, month, 1)
    # date.weekday(): Monday=0 ... Sunday=6; shift so Sunday leads the week.
    leading = (first.weekday() + 1) % 7
    start = add_days(first, -leading)
    return [add_days(start, offset) for offset in range(GRID_DAYS)]


def month_grid(
    year: int,
    month: int,
    history: Sequence[PeriodRecord],
    cycle_data: CycleData,
    symptom_dates: Collection[date],
    today: date,
) -> list[CalendarDay]:
    """Classify every cell of a month view.

    Args:
        year, month:   Month to render.
        history:       Period records, most recent first.
        cycle_data:    Current cycle view (predictions).
        symptom_dates: Dates with logged symptoms.
        today:         Reference date.

    Returns:
        42 CalendarDay cells in display order.
    """
    symptom_days = set(symptom_dates)
    return [
        classify_day(
            d,
            history,
            cycle_data,
            symptom_days,
            today,
            in_month=(d.year == year and d.month == month),
        )
        for d in grid_dates(year, month)
    ]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last date covered by the month's grid."""
    dates = grid_dates(year, month)
    return dates[0], dates[-1]
