"""Shared fixtures for route tests.

Routes run without the auth middleware: ``get_current_user`` and the
repository/service dependencies are overridden with in-memory versions.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.config import Settings, get_settings
from src.dependencies import (
    AuthContext,
    get_current_user,
    get_cycle_repository,
    get_cycle_service,
)
from src.menstrual.config_loader import CycleConfig
from src.routers import cycle, health, periods, symptoms
from src.services.cycle_service import CycleService
from src.services.tests.fakes import InMemoryCycleRepository

TEST_USER_ID = UUID("00000000-0000-0000-0000-0000000000aa")
TEST_TODAY = date(2026, 2, 23)
API = "/api/v1"


@pytest.fixture
def repository() -> InMemoryCycleRepository:
    return InMemoryCycleRepository()


@pytest.fixture
def app(repository: InMemoryCycleRepository) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router)
    for module in (periods, symptoms, cycle):
        app.include_router(module.router, prefix=API)

    app.dependency_overrides[get_current_user] = lambda: AuthContext(
        user_id="user_test", luna_user_id=TEST_USER_ID
    )
    app.dependency_overrides[get_cycle_repository] = lambda: repository
    app.dependency_overrides[get_cycle_service] = lambda: CycleService(
        repository, clock=lambda: TEST_TODAY, config=CycleConfig()
    )
    app.dependency_overrides[get_settings] = lambda: Settings(
        database_url="postgresql://localhost/luna_test"
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
