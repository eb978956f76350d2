"""Shared fixtures: in-memory database, fixed clock, mock e-mail transport and API client."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from parish_ledger.config import Settings
from parish_ledger.database import Database
from parish_ledger.main import create_app
from parish_ledger.services.clock import FixedClock
from parish_ledger.services.family_service import FamilyService
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.notification_service import MockTransport, NotificationOutbox
from parish_ledger.services.unit_service import UnitService

# Subscriptions start 2025-07; "today" is mid-September, so July, August and
# September 2025 are the active months.
START_MONTH = "2025-07"
TODAY = date(2025, 9, 15)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def policy(clock):
    return MonthRangePolicy(START_MONTH, clock=clock)


@pytest.fixture
def database():
    """In-memory SQLite database with all tables created."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def db_session(database):
    with database.session() as session:
        yield session


@pytest.fixture
def outbox():
    return NotificationOutbox()


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        subscription_start_month=START_MONTH,
        smtp_host=None,
        smtp_port=None,
        smtp_user=None,
        smtp_password=None,
        log_file=str(tmp_path / "server.log"),
    )


@pytest.fixture
def app(settings, database, transport, clock):
    return create_app(settings=settings, database=database, transport=transport, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unit(db_session):
    return UnitService(db_session).create_unit("St. Joseph", "Ward 1")


@pytest.fixture
def other_unit(db_session):
    return UnitService(db_session).create_unit("St. Mary")


@pytest.fixture
def family(db_session, unit):
    """Family with an e-mail address, so writes produce notifications."""
    return FamilyService(db_session).create_family(
        unit.id,
        "HC-001",
        "Thomas Mathew",
        email="thomas@example.com",
        address="12 Church Road",
    )


@pytest.fixture
def family_without_email(db_session, unit):
    return FamilyService(db_session).create_family(unit.id, "HC-002", "Anna George")
