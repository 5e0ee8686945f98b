"""
Pytest configuration and fixtures for the API tests.

The API is stateless: every request carries the full profile or plan,
so no database or cache fixtures are needed.
"""
import pytest
import sys
import os

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from services.plan_engine import ConfigService


@pytest.fixture(autouse=True)
def _fresh_config():
    ConfigService.reload()
    yield


@pytest.fixture(scope="session")
def client():
    from main import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def profile_payload():
    """Six-day intermediate marathon profile."""
    return {
        "race_distance": "Marathon",
        "total_weeks": 16,
        "current_weekly_volume": 25,
        "current_long_session_distance": 6,
        "experience_level": "intermediate",
        "available_days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Saturday", "Sunday"],
        "hard_session_days": ["Tuesday", "Thursday"],
        "long_session_day": "Sunday",
        "seed": 42,
    }
