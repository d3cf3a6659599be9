"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.services.cycle_repository import CycleRepository, PostgresCycleRepository
from src.services.cycle_service import CycleService


@dataclass(frozen=True)
class AuthContext:
    """Authenticated user context extracted from the Clerk JWT."""

    user_id: str  # Clerk user ID (e.g. "user_2x...")
    luna_user_id: uuid.UUID | None = None  # internal UUID from the session token template
    email: str | None = None
    session_id: str | None = None


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated user from the request state.

    The auth middleware sets ``request.state.auth`` before routes run.
    Tokens without a provisioned Luna user id cannot read cycle data.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if auth.luna_user_id is None:
        raise HTTPException(status_code=403, detail="User not provisioned")
    return auth


def get_cycle_repository() -> CycleRepository:
    return PostgresCycleRepository()


def get_cycle_service(
    repository: Annotated[CycleRepository, Depends(get_cycle_repository)],
) -> CycleService:
    return CycleService(repository)


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Repository = Annotated[CycleRepository, Depends(get_cycle_repository)]
Cycles = Annotated[CycleService, Depends(get_cycle_service)]
