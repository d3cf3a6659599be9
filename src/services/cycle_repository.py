"""Storage for period records, symptom logs and cycle settings.

The predictor only ever needs ``list_periods`` and ``get_settings``; the
remaining operations back the logging endpoints.

Tables (one row per user + key, all protected by RLS on ``user_id``):
    menstrual_periods:  (user_id, period_id) PK, start_date, end_date,
                        flow_intensities JSONB {iso date: intensity}, notes
    menstrual_symptoms: (user_id, symptom_date) PK, symptoms JSONB list, notes
    menstrual_settings: user_id PK, default_cycle_length, default_period_length,
                        period_reminder_enabled, period_reminder_days,
                        ovulation_reminder_enabled
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, fields, replace
from datetime import date
from typing import Any, Iterable
from uuid import UUID

import asyncpg

from src.menstrual.records import FlowIntensity, PeriodRecord, SettingsRecord
from src.menstrual.symptoms import LoggedSymptom, SymptomEntry
from src.services.database import execute, fetch, fetchrow, get_connection

logger = logging.getLogger("luna.services.cycle_repository")

_SETTINGS_FIELDS = tuple(f.name for f in fields(SettingsRecord))


class PeriodNotFoundError(LookupError):
    """Raised when a period id does not exist for the user."""


class InvalidPeriodError(ValueError):
    """Raised when a period update would make the record inconsistent."""


def period_id_for(start_date: date) -> str:
    """Period ids are derived from the start date, one period per start day."""
    return f"period_{start_date.isoformat()}"


class CycleRepository(ABC):
    """Abstract storage for one user's cycle data.

    Implementations must return period history sorted by start date,
    most recent first, and must default settings when none are stored.
    """

    # ------------------------------------------------------------------
    # Periods
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_periods(self, user_id: UUID) -> list[PeriodRecord]:
        """Return all periods, most recent start first."""

    @abstractmethod
    async def get_last_period(self, user_id: UUID) -> PeriodRecord | None:
        """Return the most recent period or None."""

    @abstractmethod
    async def log_period_start(
        self,
        user_id: UUID,
        start_date: date,
        flow: FlowIntensity = FlowIntensity.medium,
        notes: str | None = None,
    ) -> PeriodRecord:
        """Create (or overwrite) the period starting on ``start_date``."""

    @abstractmethod
    async def log_period_end(
        self, user_id: UUID, period_id: str, end_date: date
    ) -> PeriodRecord:
        """Close a period.

        Raises:
            PeriodNotFoundError: Unknown ``period_id``.
            InvalidPeriodError:  ``end_date`` precedes the start date.
        """

    @abstractmethod
    async def update_flow_intensity(
        self, user_id: UUID, period_id: str, day: date, intensity: FlowIntensity
    ) -> PeriodRecord:
        """Set the flow for one day of a period.

        Raises:
            PeriodNotFoundError: Unknown ``period_id``.
        """

    @abstractmethod
    async def delete_period(self, user_id: UUID, period_id: str) -> None:
        """Delete a period.

        Raises:
            PeriodNotFoundError: Unknown ``period_id``.
        """

    # ------------------------------------------------------------------
    # Symptoms
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_symptoms_by_date(self, user_id: UUID, day: date) -> SymptomEntry | None:
        ...

    @abstractmethod
    async def get_symptoms_in_range(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> list[SymptomEntry]:
        """Return entries within the inclusive range, newest first."""

    @abstractmethod
    async def log_symptoms(
        self,
        user_id: UUID,
        day: date,
        symptoms: list[LoggedSymptom],
        notes: str | None = None,
    ) -> SymptomEntry:
        """Replace the day's symptom entry."""

    @abstractmethod
    async def add_symptoms(
        self, user_id: UUID, day: date, symptoms: list[LoggedSymptom]
    ) -> SymptomEntry:
        """Append to the day's symptom entry, creating it when absent."""

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_settings(self, user_id: UUID) -> SettingsRecord:
        """Return stored settings, or defaults when none exist."""

    @abstractmethod
    async def update_settings(self, user_id: UUID, changes: dict[str, Any]) -> SettingsRecord:
        """Merge ``changes`` into the stored settings and return the result."""


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _period_from_row(row: asyncpg.Record | dict) -> PeriodRecord:
    flows = row["flow_intensities"] or {}
    return PeriodRecord(
        period_id=row["period_id"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        flow_intensity_by_date={
            date.fromisoformat(day): FlowIntensity(value) for day, value in flows.items()
        },
        notes=row["notes"],
    )


def _symptoms_to_json(symptoms: Iterable[LoggedSymptom]) -> list[dict[str, Any]]:
    return [asdict(s) for s in symptoms]


def _symptom_entry_from_row(row: asyncpg.Record | dict) -> SymptomEntry:
    return SymptomEntry(
        day=row["symptom_date"],
        symptoms=[
            LoggedSymptom(
                category=item["category"],
                symptom=item["symptom"],
                intensity=item.get("intensity"),
            )
            for item in (row["symptoms"] or [])
        ],
        notes=row["notes"],
    )


def _settings_from_row(row: asyncpg.Record | dict) -> SettingsRecord:
    return SettingsRecord(**{name: row[name] for name in _SETTINGS_FIELDS})


# ---------------------------------------------------------------------------
# Postgres implementation
# ---------------------------------------------------------------------------

_PERIOD_COLUMNS = "period_id, start_date, end_date, flow_intensities, notes"
_SYMPTOM_COLUMNS = "symptom_date, symptoms, notes"


class PostgresCycleRepository(CycleRepository):
    """CycleRepository backed by the pooled asyncpg helpers."""

    async def list_periods(self, user_id: UUID) -> list[PeriodRecord]:
        rows = await fetch(
            f"""
            SELECT {_PERIOD_COLUMNS} FROM menstrual_periods
            WHERE user_id = $1
            ORDER BY start_date DESC
            """,
            user_id,
            user_id=user_id,
        )
        return [_period_from_row(r) for r in rows]

    async def get_last_period(self, user_id: UUID) -> PeriodRecord | None:
        row = await fetchrow(
            f"""
            SELECT {_PERIOD_COLUMNS} FROM menstrual_periods
            WHERE user_id = $1
            ORDER BY start_date DESC
            LIMIT 1
            """,
            user_id,
            user_id=user_id,
        )
        return _period_from_row(row) if row else None

    async def log_period_start(
        self,
        user_id: UUID,
        start_date: date,
        flow: FlowIntensity = FlowIntensity.medium,
        notes: str | None = None,
    ) -> PeriodRecord:
        period_id = period_id_for(start_date)
        row = await fetchrow(
            f"""
            INSERT INTO menstrual_periods (
                user_id, period_id, start_date, end_date, flow_intensities, notes
            ) VALUES ($1, $2, $3, NULL, $4, $5)
            ON CONFLICT (user_id, period_id) DO UPDATE SET
                start_date = EXCLUDED.start_date,
                end_date = NULL,
                flow_intensities = EXCLUDED.flow_intensities,
                notes = EXCLUDED.notes,
                updated_at = NOW()
            RETURNING {_PERIOD_COLUMNS}
            """,
            user_id,
            period_id,
            start_date,
            {start_date.isoformat(): FlowIntensity(flow).value},
            notes,
            user_id=user_id,
        )
        logger.info("Logged period start %s for user %s", start_date, user_id)
        return _period_from_row(row)

    async def log_period_end(
        self, user_id: UUID, period_id: str, end_date: date
    ) -> PeriodRecord:
        async with get_connection(user_id=user_id) as conn:
            start = await conn.fetchval(
                """
                SELECT start_date FROM menstrual_periods
                WHERE user_id = $1 AND period_id = $2
                FOR UPDATE
                """,
                user_id,
                period_id,
            )
            if start is None:
                raise PeriodNotFoundError(period_id)
            if end_date < start:
                raise InvalidPeriodError(
                    f"End date {end_date} is before period start {start}"
                )
            row = await conn.fetchrow(
                f"""
                UPDATE menstrual_periods SET end_date = $3, updated_at = NOW()
                WHERE user_id = $1 AND period_id = $2
                RETURNING {_PERIOD_COLUMNS}
                """,
                user_id,
                period_id,
                end_date,
            )
        logger.info("Logged period end %s for %s", end_date, period_id)
        return _period_from_row(row)

    async def update_flow_intensity(
        self, user_id: UUID, period_id: str, day: date, intensity: FlowIntensity
    ) -> PeriodRecord:
        row = await fetchrow(
            f"""
            UPDATE menstrual_periods SET
                flow_intensities = COALESCE(flow_intensities, '{{}}'::jsonb)
                    || jsonb_build_object($3::text, $4::text),
                updated_at = NOW()
            WHERE user_id = $1 AND period_id = $2
            RETURNING {_PERIOD_COLUMNS}
            """,
            user_id,
            period_id,
            day.isoformat(),
            FlowIntensity(intensity).value,
            user_id=user_id,
        )
        if row is None:
            raise PeriodNotFoundError(period_id)
        return _period_from_row(row)

    async def delete_period(self, user_id: UUID, period_id: str) -> None:
        result = await execute(
            "DELETE FROM menstrual_periods WHERE user_id = $1 AND period_id = $2",
            user_id,
            period_id,
            user_id=user_id,
        )
        if result == "DELETE 0":
            raise PeriodNotFoundError(period_id)
        logger.info("Deleted %s for user %s", period_id, user_id)

    async def get_symptoms_by_date(self, user_id: UUID, day: date) -> SymptomEntry | None:
        row = await fetchrow(
            f"""
            SELECT {_SYMPTOM_COLUMNS} FROM menstrual_symptoms
            WHERE user_id = $1 AND symptom_date = $2
            """,
            user_id,
            day,
            user_id=user_id,
        )
        return _symptom_entry_from_row(row) if row else None

    async def get_symptoms_in_range(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> list[SymptomEntry]:
        rows = await fetch(
            f"""
            SELECT {_SYMPTOM_COLUMNS} FROM menstrual_symptoms
            WHERE user_id = $1 AND symptom_date >= $2 AND symptom_date <= $3
            ORDER BY symptom_date DESC
            """,
            user_id,
            start_date,
            end_date,
            user_id=user_id,
        )
        return [_symptom_entry_from_row(r) for r in rows]

    async def log_symptoms(
        self,
        user_id: UUID,
        day: date,
        symptoms: list[LoggedSymptom],
        notes: str | None = None,
    ) -> SymptomEntry:
        row = await fetchrow(
            f"""
            INSERT INTO menstrual_symptoms (user_id, symptom_date, symptoms, notes)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_id, symptom_date) DO UPDATE SET
                symptoms = EXCLUDED.symptoms,
                notes = EXCLUDED.notes,
                updated_at = NOW()
            RETURNING {_SYMPTOM_COLUMNS}
            """,
            user_id,
            day,
            _symptoms_to_json(symptoms),
            notes,
            user_id=user_id,
        )
        return _symptom_entry_from_row(row)

    async def add_symptoms(
        self, user_id: UUID, day: date, symptoms: list[LoggedSymptom]
    ) -> SymptomEntry:
        row = await fetchrow(
            f"""
            INSERT INTO menstrual_symptoms (user_id, symptom_date, symptoms)
            VALUES ($1, $2, $3)
            ON CONFLICT (user_id, symptom_date) DO UPDATE SET
                symptoms = menstrual_symptoms.symptoms || EXCLUDED.symptoms,
                updated_at = NOW()
            RETURNING {_SYMPTOM_COLUMNS}
            """,
            user_id,
            day,
            _symptoms_to_json(symptoms),
            user_id=user_id,
        )
        return _symptom_entry_from_row(row)

    async def get_settings(self, user_id: UUID) -> SettingsRecord:
        row = await fetchrow(
            f"SELECT {', '.join(_SETTINGS_FIELDS)} FROM menstrual_settings WHERE user_id = $1",
            user_id,
            user_id=user_id,
        )
        return _settings_from_row(row) if row else SettingsRecord()

    async def update_settings(self, user_id: UUID, changes: dict[str, Any]) -> SettingsRecord:
        unknown = set(changes) - set(_SETTINGS_FIELDS)
        if unknown:
            raise ValueError(f"Unknown settings fields: {sorted(unknown)}")

        columns = ", ".join(_SETTINGS_FIELDS)
        placeholders = ", ".join(f"${i}" for i in range(2, len(_SETTINGS_FIELDS) + 2))
        assignments = ", ".join(f"{name} = EXCLUDED.{name}" for name in _SETTINGS_FIELDS)

        async with get_connection(user_id=user_id) as conn:
            current_row = await conn.fetchrow(
                f"SELECT {columns} FROM menstrual_settings WHERE user_id = $1 FOR UPDATE",
                user_id,
            )
            current = _settings_from_row(current_row) if current_row else SettingsRecord()
            merged = replace(current, **changes)
            row = await conn.fetchrow(
                f"""
                INSERT INTO menstrual_settings (user_id, {columns})
                VALUES ($1, {placeholders})
                ON CONFLICT (user_id) DO UPDATE SET {assignments}, updated_at = NOW()
                RETURNING {columns}
                """,
                user_id,
                *(getattr(merged, name) for name in _SETTINGS_FIELDS),
            )
        logger.info("Updated cycle settings for user %s: %s", user_id, sorted(changes))
        return _settings_from_row(row)
