"""Endpoints for logging periods: start, end, per-day flow, delete."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from src.dependencies import CurrentUser, Repository
from src.models.menstrual import (
    FlowIntensityUpdate,
    PeriodEndUpdate,
    PeriodRead,
    PeriodStartCreate,
)
from src.services.cycle_repository import InvalidPeriodError, PeriodNotFoundError

router = APIRouter(prefix="/periods", tags=["periods"])


@router.get("", response_model=list[PeriodRead])
async def list_periods(user: CurrentUser, repository: Repository) -> Any:
    periods = await repository.list_periods(user.luna_user_id)
    return [PeriodRead.model_validate(p) for p in periods]


@router.post("", response_model=PeriodRead, status_code=201)
async def log_period_start(
    user: CurrentUser, repository: Repository, body: PeriodStartCreate
) -> Any:
    period = await repository.log_period_start(
        user.luna_user_id, body.start_date, body.flow_intensity, body.notes
    )
    return PeriodRead.model_validate(period)


@router.patch("/{period_id}/end", response_model=PeriodRead)
async def log_period_end(
    period_id: str, user: CurrentUser, repository: Repository, body: PeriodEndUpdate
) -> Any:
    try:
        period = await repository.log_period_end(
            user.luna_user_id, period_id, body.end_date
        )
    except PeriodNotFoundError:
        raise HTTPException(status_code=404, detail="Period not found")
    except InvalidPeriodError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return PeriodRead.model_validate(period)


@router.put("/{period_id}/flow", response_model=PeriodRead)
async def update_flow_intensity(
    period_id: str, user: CurrentUser, repository: Repository, body: FlowIntensityUpdate
) -> Any:
    try:
        period = await repository.update_flow_intensity(
            user.luna_user_id, period_id, body.day, body.intensity
        )
    except PeriodNotFoundError:
        raise HTTPException(status_code=404, detail="Period not found")
    return PeriodRead.model_validate(period)


@router.delete("/{period_id}", status_code=204)
async def delete_period(period_id: str, user: CurrentUser, repository: Repository) -> None:
    try:
        await repository.delete_period(user.luna_user_id, period_id)
    except PeriodNotFoundError:
        raise HTTPException(status_code=404, detail="Period not found")
