"""Pydantic models for period logging, symptom logging, cycle settings and
the derived cycle views."""

from __future__ import annotations

from datetime import date

from pydantic import Field, model_validator

from src.menstrual.records import (
    CyclePhase,
    FertilityConfidence,
    FlowIntensity,
    InsightType,
)
from src.menstrual.symptoms import validate_symptom
from src.models.base import LunaBase


# ---------- Periods ----------

class PeriodStartCreate(LunaBase):
    start_date: date
    flow_intensity: FlowIntensity = FlowIntensity.medium
    notes: str | None = None


class PeriodEndUpdate(LunaBase):
    end_date: date


class FlowIntensityUpdate(LunaBase):
    day: date
    intensity: FlowIntensity


class PeriodRead(LunaBase):
    period_id: str
    start_date: date
    end_date: date | None = None
    flow_intensity_by_date: dict[date, FlowIntensity] = Field(default_factory=dict)
    notes: str | None = None


# ---------- Symptoms ----------

class LoggedSymptomIn(LunaBase):
    category: str
    symptom: str
    intensity: int | None = Field(default=None, ge=1, le=3)

    @model_validator(mode="after")
    def _known_symptom(self) -> LoggedSymptomIn:
        validate_symptom(self.category, self.symptom)
        return self


class SymptomLogCreate(LunaBase):
    symptoms: list[LoggedSymptomIn]
    notes: str | None = None


class SymptomAppend(LunaBase):
    symptoms: list[LoggedSymptomIn] = Field(min_length=1)


class LoggedSymptomRead(LunaBase):
    category: str
    symptom: str
    intensity: int | None = None


class SymptomEntryRead(LunaBase):
    day: date
    symptoms: list[LoggedSymptomRead] = Field(default_factory=list)
    notes: str | None = None


# ---------- Settings ----------

class CycleSettingsRead(LunaBase):
    default_cycle_length: int
    default_period_length: int
    period_reminder_enabled: bool
    period_reminder_days: int
    ovulation_reminder_enabled: bool


class CycleSettingsUpdate(LunaBase):
    default_cycle_length: int | None = Field(default=None, ge=21, le=45)
    default_period_length: int | None = Field(default=None, ge=1, le=10)
    period_reminder_enabled: bool | None = None
    period_reminder_days: int | None = Field(default=None, ge=0, le=14)
    ovulation_reminder_enabled: bool | None = None


# ---------- Derived views ----------

class FertilityWindowRead(LunaBase):
    fertile_start: date
    fertile_end: date
    ovulation_date: date
    confidence: FertilityConfidence


class CycleDataRead(LunaBase):
    current_cycle_day: int
    cycle_phase: CyclePhase
    next_period_date: date | None = None
    days_until_next_period: int | None = None
    last_period_start: date | None = None
    last_period_end: date | None = None
    average_cycle_length: int
    average_period_length: int
    cycle_count: int
    fertility_window: FertilityWindowRead | None = None
    is_on_period: bool


class CycleHistoryEntryRead(LunaBase):
    cycle_number: int
    start_date: date
    end_date: date
    cycle_length: int
    period_length: int


class DailyInsightRead(LunaBase):
    title: str
    message: str
    type: InsightType
    icon: str


class PhaseInfoRead(LunaBase):
    phase: CyclePhase
    label: str
    color: str
    description: str


class CalendarDayRead(LunaBase):
    day: date
    in_month: bool
    is_today: bool
    is_period: bool
    is_predicted_period: bool
    is_fertile: bool
    is_ovulation: bool
    has_symptoms: bool
