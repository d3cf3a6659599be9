"""Cycle views for a user: fetch history, compute, return.

Glues a CycleRepository to the pure predictor.  The clock is injected so
the service (and everything downstream) can be tested against a fixed day.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable
from uuid import UUID

from src.menstrual.calendar import CalendarDay, month_bounds, month_grid
from src.menstrual.config_loader import CycleConfig, get_cycle_config
from src.menstrual.cycle_predictor import compute_cycle_data, compute_cycle_history
from src.menstrual.insights import compute_daily_insights
from src.menstrual.records import CycleData, CycleHistoryEntry, DailyInsight
from src.services.cycle_repository import CycleRepository

logger = logging.getLogger("luna.services.cycle_service")


class CycleService:
    """Compute a user's cycle views from stored history.

    Usage::

        service = CycleService(PostgresCycleRepository())
        data = await service.get_cycle_data(user_id)
        print(data.cycle_phase, data.next_period_date)
    """

    def __init__(
        self,
        repository: CycleRepository,
        clock: Callable[[], date] = date.today,
        config: CycleConfig | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._config = config

    @property
    def config(self) -> CycleConfig:
        return self._config or get_cycle_config()

    def today(self) -> date:
        return self._clock()

    async def get_cycle_data(self, user_id: UUID) -> CycleData:
        periods, settings = await asyncio.gather(
            self._repository.list_periods(user_id),
            self._repository.get_settings(user_id),
        )
        data = compute_cycle_data(periods, settings, self.today(), self.config)
        logger.debug(
            "Cycle data for %s: day=%d phase=%s cycles=%d",
            user_id,
            data.current_cycle_day,
            data.cycle_phase.value,
            data.cycle_count,
        )
        return data

    async def get_cycle_history(self, user_id: UUID) -> list[CycleHistoryEntry]:
        periods = await self._repository.list_periods(user_id)
        return compute_cycle_history(periods)

    async def get_daily_insights(self, user_id: UUID) -> list[DailyInsight]:
        data = await self.get_cycle_data(user_id)
        return compute_daily_insights(data, self.config)

    async def get_month_calendar(
        self, user_id: UUID, year: int, month: int
    ) -> list[CalendarDay]:
        """Build the month grid with logged, predicted and fertile days.

        Raises:
            ValueError: If ``month`` is outside 1..12.
        """
        first, last = month_bounds(year, month)
        today = self.today()
        periods, settings, symptoms = await asyncio.gather(
            self._repository.list_periods(user_id),
            self._repository.get_settings(user_id),
            self._repository.get_symptoms_in_range(user_id, first, last),
        )
        data = compute_cycle_data(periods, settings, today, self.config)
        return month_grid(
            year,
            month,
            periods,
            data,
            [entry.day for entry in symptoms],
            today,
        )
