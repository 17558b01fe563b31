"""
Shared fixtures for the Customs Process Tracker test suite.
"""

import os

import pytest

from customs_tracker.core.controller import ProcessExecutionController
from customs_tracker.core.exceptions import error_registry
from customs_tracker.models.process import ProcessType
from customs_tracker.models.session import UserRole
from customs_tracker.models.shipment import ShipmentItem, ShipmentType
from customs_tracker.utils.config import ENV_PREFIX
from customs_tracker.utils.logger import clear_log_context

from tests.fakes import InMemoryStore

OPERATOR_ID = "operator-1"
ADMIN_ID = "admin-1"
SHIPMENT_ID = "shipment-1"
PROCESS_ID = "process-import"
STEP_TITLES = ["Document check", "Physical inspection", "Release"]


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    for name in list(os.environ):
        if name.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _reset_globals():
    yield
    error_registry.reset()
    clear_log_context()


@pytest.fixture
def store():
    """Store seeded with an operator in session, an admin and one import shipment."""
    store = InMemoryStore()
    store.add_profile(OPERATOR_ID)
    store.add_profile(ADMIN_ID, role=UserRole.ADMIN)
    store.add_session(OPERATOR_ID)
    store.add_shipment(
        SHIPMENT_ID,
        ShipmentType.IMPORT,
        tracking_code="TRK-0001",
        items=[
            ShipmentItem(id="item-2", shipment_id=SHIPMENT_ID, name="Tyres", quantity=40, unit="pcs"),
            ShipmentItem(id="item-1", shipment_id=SHIPMENT_ID, name="Bearings", quantity=12, unit="box"),
        ]
    )
    return store


@pytest.fixture
def process(store):
    """Three-step import process."""
    return store.add_process(PROCESS_ID, ProcessType.IMPORT, STEP_TITLES)


@pytest.fixture
def controller(store):
    return ProcessExecutionController(store)
