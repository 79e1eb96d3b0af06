"""Shared pytest configuration and fixtures for everyrow_sheets tests."""

import pytest

from everyrow_sheets.client.base import StaticCredentialProvider
from everyrow_sheets.client.local import LocalWorkbook
from everyrow_sheets.operations.orchestrator import OperationOrchestrator
from everyrow_sheets.tasks.store import InMemoryTaskStore

from tests.helpers.fake_service import FakeClock, FakeEveryrowService


@pytest.fixture
def companies_grid():
    return [
        ["Name", "Emp"],
        ["Apple", 150000],
        ["Acme", 500],
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def workbook(companies_grid) -> LocalWorkbook:
    return LocalWorkbook({"Companies": companies_grid})


@pytest.fixture
def make_orchestrator(store, workbook, clock):
    """Build an orchestrator around a FakeEveryrowService.

    Returns a factory ``(service, **kwargs) -> OperationOrchestrator``; keyword
    arguments override the constructor defaults.
    """

    def _make(service: FakeEveryrowService, **kwargs) -> OperationOrchestrator:
        options = dict(
            credentials=StaticCredentialProvider("sk-cho-test"),
            store=store,
            selection=workbook,
            writer=workbook,
            client_factory=lambda api_key: service,
            clock=clock,
            sleep=clock.sleep,
        )
        options.update(kwargs)
        return OperationOrchestrator(**options)

    return _make
