"""Endpoints for daily symptom logs."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import CurrentUser, Repository
from src.menstrual.symptoms import LoggedSymptom
from src.models.menstrual import (
    LoggedSymptomIn,
    SymptomAppend,
    SymptomEntryRead,
    SymptomLogCreate,
)

router = APIRouter(prefix="/symptoms", tags=["symptoms"])


def _to_logged(items: list[LoggedSymptomIn]) -> list[LoggedSymptom]:
    return [LoggedSymptom(i.category, i.symptom, i.intensity) for i in items]


@router.get("", response_model=list[SymptomEntryRead])
async def list_symptoms(
    user: CurrentUser,
    repository: Repository,
    start_date: date = Query(),
    end_date: date = Query(),
) -> Any:
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not precede start_date")
    entries = await repository.get_symptoms_in_range(user.luna_user_id, start_date, end_date)
    return [SymptomEntryRead.model_validate(e) for e in entries]


@router.get("/{day}", response_model=SymptomEntryRead)
async def get_symptoms(day: date, user: CurrentUser, repository: Repository) -> Any:
    entry = await repository.get_symptoms_by_date(user.luna_user_id, day)
    if entry is None:
        raise HTTPException(status_code=404, detail="No symptoms logged for this day")
    return SymptomEntryRead.model_validate(entry)


@router.put("/{day}", response_model=SymptomEntryRead)
async def log_symptoms(
    day: date, user: CurrentUser, repository: Repository, body: SymptomLogCreate
) -> Any:
    entry = await repository.log_symptoms(
        user.luna_user_id, day, _to_logged(body.symptoms), body.notes
    )
    return SymptomEntryRead.model_validate(entry)


@router.post("/{day}", response_model=SymptomEntryRead)
async def add_symptoms(
    day: date, user: CurrentUser, repository: Repository, body: SymptomAppend
) -> Any:
    entry = await repository.add_symptoms(user.luna_user_id, day, _to_logged(body.symptoms))
    return SymptomEntryRead.model_validate(entry)
