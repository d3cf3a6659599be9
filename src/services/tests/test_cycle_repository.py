"""Tests for the Postgres cycle repository with the DB helpers mocked out."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from src.menstrual.records import FlowIntensity, SettingsRecord
from src.menstrual.symptoms import LoggedSymptom
from src.services import cycle_repository
from src.services.cycle_repository import (
    InvalidPeriodError,
    PeriodNotFoundError,
    PostgresCycleRepository,
    period_id_for,
)

USER_ID = uuid4()


def period_row(start: date, end: date | None = None, flows: dict | None = None) -> dict:
    return {
        "period_id": period_id_for(start),
        "start_date": start,
        "end_date": end,
        "flow_intensities": flows,
        "notes": None,
    }


def settings_row(**overrides) -> dict:
    row = {
        "default_cycle_length": 28,
        "default_period_length": 5,
        "period_reminder_enabled": True,
        "period_reminder_days": 2,
        "ovulation_reminder_enabled": False,
    }
    row.update(overrides)
    return row


def fake_connection(conn: MagicMock):
    @asynccontextmanager
    async def _get_connection(user_id=None):
        yield conn

    return _get_connection


@pytest.fixture
def repository() -> PostgresCycleRepository:
    return PostgresCycleRepository()


class TestPeriods:
    def test_period_id_from_start_date(self) -> None:
        assert period_id_for(date(2026, 2, 1)) == "period_2026-02-01"

    @pytest.mark.asyncio
    async def test_list_periods_converts_rows(self, repository) -> None:
        rows = [
            period_row(date(2026, 2, 1), None, {"2026-02-01": "heavy"}),
            period_row(date(2026, 1, 4), date(2026, 1, 8)),
        ]
        with patch.object(cycle_repository, "fetch", AsyncMock(return_value=rows)) as fetch:
            periods = await repository.list_periods(USER_ID)

        assert [p.start_date for p in periods] == [date(2026, 2, 1), date(2026, 1, 4)]
        assert periods[0].is_ongoing
        assert periods[0].flow_intensity_by_date == {date(2026, 2, 1): FlowIntensity.heavy}
        assert periods[1].flow_intensity_by_date == {}
        assert "ORDER BY start_date DESC" in fetch.call_args.args[0]
        assert fetch.call_args.kwargs["user_id"] == USER_ID

    @pytest.mark.asyncio
    async def test_get_last_period_none(self, repository) -> None:
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=None)):
            assert await repository.get_last_period(USER_ID) is None

    @pytest.mark.asyncio
    async def test_log_period_start_seeds_flow(self, repository) -> None:
        start = date(2026, 2, 20)
        row = period_row(start, None, {"2026-02-20": "light"})
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=row)) as fetchrow:
            period = await repository.log_period_start(USER_ID, start, FlowIntensity.light)

        args = fetchrow.call_args.args
        assert args[1:4] == (USER_ID, "period_2026-02-20", start)
        assert args[4] == {"2026-02-20": "light"}
        assert period.period_id == "period_2026-02-20"

    @pytest.mark.asyncio
    async def test_log_period_end(self, repository) -> None:
        conn = MagicMock()
        conn.fetchval = AsyncMock(return_value=date(2026, 2, 1))
        conn.fetchrow = AsyncMock(return_value=period_row(date(2026, 2, 1), date(2026, 2, 5)))
        with patch.object(cycle_repository, "get_connection", fake_connection(conn)):
            period = await repository.log_period_end(
                USER_ID, "period_2026-02-01", date(2026, 2, 5)
            )
        assert period.end_date == date(2026, 2, 5)

    @pytest.mark.asyncio
    async def test_log_period_end_unknown_period(self, repository) -> None:
        conn = MagicMock()
        conn.fetchval = AsyncMock(return_value=None)
        conn.fetchrow = AsyncMock()
        with patch.object(cycle_repository, "get_connection", fake_connection(conn)):
            with pytest.raises(PeriodNotFoundError):
                await repository.log_period_end(USER_ID, "period_x", date(2026, 2, 5))
        conn.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_log_period_end_before_start(self, repository) -> None:
        conn = MagicMock()
        conn.fetchval = AsyncMock(return_value=date(2026, 2, 10))
        conn.fetchrow = AsyncMock()
        with patch.object(cycle_repository, "get_connection", fake_connection(conn)):
            with pytest.raises(InvalidPeriodError):
                await repository.log_period_end(
                    USER_ID, "period_2026-02-10", date(2026, 2, 9)
                )
        conn.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_flow_unknown_period(self, repository) -> None:
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=None)):
            with pytest.raises(PeriodNotFoundError):
                await repository.update_flow_intensity(
                    USER_ID, "period_x", date(2026, 2, 2), FlowIntensity.heavy
                )

    @pytest.mark.asyncio
    async def test_delete_missing_period(self, repository) -> None:
        with patch.object(cycle_repository, "execute", AsyncMock(return_value="DELETE 0")):
            with pytest.raises(PeriodNotFoundError):
                await repository.delete_period(USER_ID, "period_x")

    @pytest.mark.asyncio
    async def test_delete_period(self, repository) -> None:
        with patch.object(cycle_repository, "execute", AsyncMock(return_value="DELETE 1")):
            await repository.delete_period(USER_ID, "period_2026-02-01")


class TestSymptoms:
    @pytest.mark.asyncio
    async def test_log_symptoms_serializes_entries(self, repository) -> None:
        day = date(2026, 2, 3)
        row = {
            "symptom_date": day,
            "symptoms": [{"category": "physical", "symptom": "cramps", "intensity": 2}],
            "notes": "rough day",
        }
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=row)) as fetchrow:
            entry = await repository.log_symptoms(
                USER_ID, day, [LoggedSymptom("physical", "cramps", 2)], "rough day"
            )

        assert fetchrow.call_args.args[3] == [
            {"category": "physical", "symptom": "cramps", "intensity": 2}
        ]
        assert entry.symptoms == [LoggedSymptom("physical", "cramps", 2)]
        assert entry.notes == "rough day"

    @pytest.mark.asyncio
    async def test_missing_intensity_reads_as_none(self, repository) -> None:
        row = {
            "symptom_date": date(2026, 2, 3),
            "symptoms": [{"category": "mood", "symptom": "calm"}],
            "notes": None,
        }
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=row)):
            entry = await repository.get_symptoms_by_date(USER_ID, date(2026, 2, 3))
        assert entry.symptoms[0].intensity is None


class TestSettings:
    @pytest.mark.asyncio
    async def test_defaults_when_nothing_stored(self, repository) -> None:
        with patch.object(cycle_repository, "fetchrow", AsyncMock(return_value=None)):
            assert await repository.get_settings(USER_ID) == SettingsRecord()

    @pytest.mark.asyncio
    async def test_update_merges_into_current(self, repository) -> None:
        conn = MagicMock()
        conn.fetchrow = AsyncMock(
            side_effect=[
                settings_row(period_reminder_days=4),
                settings_row(period_reminder_days=4, default_cycle_length=30),
            ]
        )
        with patch.object(cycle_repository, "get_connection", fake_connection(conn)):
            settings = await repository.update_settings(
                USER_ID, {"default_cycle_length": 30}
            )

        upsert_args = conn.fetchrow.call_args_list[1].args
        assert upsert_args[1:] == (USER_ID, 30, 5, True, 4, False)
        assert settings.default_cycle_length == 30
        assert settings.period_reminder_days == 4

    @pytest.mark.asyncio
    async def test_unknown_field_rejected_before_query(self, repository) -> None:
        get_connection = MagicMock()
        with patch.object(cycle_repository, "get_connection", get_connection):
            with pytest.raises(ValueError, match="cycle_colour"):
                await repository.update_settings(USER_ID, {"cycle_colour": "red"})
        get_connection.assert_not_called()
