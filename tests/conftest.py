from __future__ import annotations

import pytest
from fleet_fakes import ADMIN_EMAIL, ADMIN_PASSWORD, FakeFleetBackend

from pybusfleet.config import FleetConfig
from pybusfleet.notifications import MemoryNotifier


@pytest.fixture
def config() -> FleetConfig:
    # Small pages so every listing exercises pagination.
    return FleetConfig(project_id="fleet-test", api_key="test-key", page_size=2)


@pytest.fixture
def backend(config: FleetConfig) -> FakeFleetBackend:
    fake = FakeFleetBackend(config)
    fake.add_account(ADMIN_EMAIL, ADMIN_PASSWORD)
    return fake


@pytest.fixture
def notifier() -> MemoryNotifier:
    return MemoryNotifier()
