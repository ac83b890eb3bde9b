import pytest
from datetime import datetime

from app.services.analytics import Analytics
from app.services.dispense_service import DispenseWorkflow
from app.services.prescription_store import PrescriptionStore

# Fixed "now" for workflow tests; expiry dates are compared against its date
NOW = datetime(2026, 10, 19, 12, 0, 0)
TOMORROW = "2026-10-20"


class MemoryStorage:
    """Storage double that remembers every saved value."""

    def __init__(self, value=None):
        self.value = value
        self.saves = []

    def load(self):
        return self.value

    def save(self, value):
        self.value = value
        self.saves.append(value)


@pytest.fixture
def storage():
    return MemoryStorage()

@pytest.fixture
def store(storage):
    return PrescriptionStore(storage)

@pytest.fixture
def analytics():
    return Analytics(clock=lambda: NOW)

@pytest.fixture
def workflow(store, analytics):
    return DispenseWorkflow(store, analytics, clock=lambda: NOW)
