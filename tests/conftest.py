"""Shared test fixtures for the Blue Carbon test suite."""

import os
import random

import pytest


# Ensure test environment variables are set before any config import
os.environ.setdefault("BLUECARBON_API_KEY", "test-api-key")
os.environ.setdefault("BLUECARBON_DEMO_MODE", "true")
os.environ.setdefault("BLUECARBON_LEDGER_LOG_DELAY_SECONDS", "0")
os.environ.setdefault("BLUECARBON_LEDGER_MINT_DELAY_SECONDS", "0")

from bluecarbon.carbon.models import CarbonCalculationRecord, EcosystemType, ProjectSnapshot  # noqa: E402
from bluecarbon.ledger.base import LedgerService  # noqa: E402
from bluecarbon.ledger.mock import MockLedgerService  # noqa: E402
from bluecarbon.models import Project, ProjectSubmission, User, UserProfile  # noqa: E402
from bluecarbon.storage.memory import InMemoryProjectStore  # noqa: E402
from bluecarbon.utils import CollaboratorUnavailable  # noqa: E402


class FailingLedger(LedgerService):
    """Ledger double that fails on the configured operations."""

    def __init__(self, inner: LedgerService, fail_mint: bool = False, fail_log: bool = False):
        self._inner = inner
        self.fail_mint = fail_mint
        self.fail_log = fail_log
        self.calls: list[str] = []

    def log_event(self, event_type, project_id, data, user_id):
        self.calls.append(f"log:{event_type}")
        if self.fail_log:
            raise CollaboratorUnavailable("ledger timed out")
        return self._inner.log_event(event_type, project_id, data, user_id)

    def mint(self, project):
        self.calls.append("mint")
        if self.fail_mint:
            raise ConnectionError("RPC node unreachable")
        return self._inner.mint(project)

    def explorer_url(self, transaction_hash):
        return self._inner.explorer_url(transaction_hash)


@pytest.fixture
def store():
    return InMemoryProjectStore()


@pytest.fixture
def ledger():
    """Deterministic mock ledger without latency."""
    return MockLedgerService(log_delay_seconds=0, mint_delay_seconds=0, rng=random.Random(42))


@pytest.fixture
def owner(store):
    return store.insert_user(User(
        id="owner-1",
        email="owner@mangrove.org",
        role="project_owner",
        profile=UserProfile(name="Asha Rao", organization="Mangrove Trust"),
    ))


@pytest.fixture
def verifier(store):
    return store.insert_user(User(
        id="verifier-1",
        email="verifier@registry.org",
        role="verifier",
        profile=UserProfile(name="Lee Chen"),
    ))


@pytest.fixture
def sample_submission():
    """A 10 ha mangrove restoration project."""
    return ProjectSubmission(
        name="Mumbai Mangrove Belt Restoration",
        description="Replanting degraded mangrove fringe",
        location={
            "coordinates": (72.8777, 19.0760),
            "address": "Thane Creek, Mumbai",
            "state": "Maharashtra",
            "district": "Thane",
        },
        area_m2=100_000,
        ecosystem_type=EcosystemType.mangrove,
        project_owner={
            "organization": "Mangrove Trust",
            "contact_name": "Asha Rao",
            "email": "owner@mangrove.org",
            "phone": "+91 22 5555 0100",
        },
        stakeholders=[{"name": "Thane Fisherfolk Cooperative", "role": "community", "organization": "TFC"}],
    )


@pytest.fixture
def make_snapshot():
    def _make(area_m2=100_000, ecosystem="mangrove", annual=71.05):
        return ProjectSnapshot(
            area_m2=area_m2,
            ecosystem_type=ecosystem,
            carbon_calculations=CarbonCalculationRecord(annual_co2_absorption=annual),
        )
    return _make


@pytest.fixture
def make_project():
    def _make(**overrides):
        fields = {
            "owner_id": "owner-1",
            "name": "Seagrass Meadow",
            "area_m2": 50_000,
            "ecosystem_type": "seagrass",
            "carbon_calculations": CarbonCalculationRecord(
                annual_co2_absorption=30.45,
                cumulative_co2_absorption=609.0,
                sequestration_factor=8.7,
                buffer_percentage=30.0,
            ),
        }
        fields.update(overrides)
        return Project(**fields)
    return _make


@pytest.fixture
def failing_ledger(ledger):
    return FailingLedger(ledger)
