"""Derived cycle views (current cycle, history, insights, calendar) and
cycle settings."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import Cycles, CurrentUser, Repository
from src.menstrual.insights import cycle_phase_info
from src.menstrual.records import CyclePhase
from src.models.menstrual import (
    CalendarDayRead,
    CycleDataRead,
    CycleHistoryEntryRead,
    CycleSettingsRead,
    CycleSettingsUpdate,
    DailyInsightRead,
    PhaseInfoRead,
)

router = APIRouter(prefix="/cycle", tags=["cycle"])


@router.get("", response_model=CycleDataRead)
async def get_cycle_data(user: CurrentUser, cycles: Cycles) -> Any:
    return CycleDataRead.model_validate(await cycles.get_cycle_data(user.luna_user_id))


@router.get("/history", response_model=list[CycleHistoryEntryRead])
async def get_cycle_history(user: CurrentUser, cycles: Cycles) -> Any:
    history = await cycles.get_cycle_history(user.luna_user_id)
    return [CycleHistoryEntryRead.model_validate(h) for h in history]


@router.get("/insights", response_model=list[DailyInsightRead])
async def get_daily_insights(user: CurrentUser, cycles: Cycles) -> Any:
    insights = await cycles.get_daily_insights(user.luna_user_id)
    return [DailyInsightRead.model_validate(i) for i in insights]


@router.get("/calendar", response_model=list[CalendarDayRead])
async def get_month_calendar(
    user: CurrentUser,
    cycles: Cycles,
    year: int = Query(ge=1900, le=2200),
    month: int = Query(ge=1, le=12),
) -> Any:
    days = await cycles.get_month_calendar(user.luna_user_id, year, month)
    return [CalendarDayRead.model_validate(d) for d in days]


@router.get("/phases/{phase}", response_model=PhaseInfoRead)
async def get_phase_info(phase: CyclePhase) -> Any:
    return PhaseInfoRead(phase=phase, **asdict(cycle_phase_info(phase)))


# ---------- Settings ----------

@router.get("/settings", response_model=CycleSettingsRead)
async def get_settings(user: CurrentUser, repository: Repository) -> Any:
    return CycleSettingsRead.model_validate(
        await repository.get_settings(user.luna_user_id)
    )


@router.patch("/settings", response_model=CycleSettingsRead)
async def update_settings(
    user: CurrentUser, repository: Repository, body: CycleSettingsUpdate
) -> Any:
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    settings = await repository.update_settings(user.luna_user_id, updates)
    return CycleSettingsRead.model_validate(settings)
