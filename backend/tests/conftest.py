import os
from pathlib import Path

import fakeredis
import pytest
from dotenv import load_dotenv

# Load environment variables for tests before the app settings are built
load_dotenv(Path(__file__).resolve().parents[1] / ".env.test", override=True)
os.environ["PYTEST_RUN"] = "1"

from daysheets.main import app  # noqa: E402
from daysheets.services import logo_service  # noqa: E402
from daysheets.utils import redis_cache  # noqa: E402


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Give every test its own in-memory Redis."""
    fake = fakeredis.FakeStrictRedis(decode_responses=True)
    monkeypatch.setattr(redis_cache, "_redis_client", fake)
    return fake


@pytest.fixture(autouse=True)
def reset_app_state():
    logo_service.reset_rate_limiter()
    yield
    app.dependency_overrides.clear()
