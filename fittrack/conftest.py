# fittrack/conftest.py
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to PYTHONPATH
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Settings are read at import time, so the test environment must be in place first.
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["JWT_SECRET"] = "test-secret"


@pytest.fixture(scope="function", autouse=True)
def reset_db():
    """
    Give every test an empty in-memory database and fresh metrics.
    """
    from fittrack.core.database import reset_database
    from fittrack.core.metrics import METRICS

    reset_database()
    METRICS.reset()
    yield


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from fittrack.main import app

    return TestClient(app)


class FrozenClock:
    """Settable stand-in for clock.utc_now."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, moment: datetime) -> None:
        self.moment = moment


@pytest.fixture
def frozen_now(monkeypatch):
    """
    Freeze "now" for services and routes that read the clock.

    Starts at 2024-01-01 12:00 UTC; call frozen_now.set(...) to move it.
    """
    from fittrack.core import clock

    frozen = FrozenClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(clock, "utc_now", frozen)
    return frozen
