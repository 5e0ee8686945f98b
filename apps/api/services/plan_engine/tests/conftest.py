"""
Shared fixtures for plan engine tests.
"""
import os
import random
import sys

import pytest

# services/plan_engine/tests -> apps/api
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..")))

from services.plan_engine import AthleteProfile, ConfigService, WorkoutCatalog


SIX_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Saturday", "Sunday"]


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test reads the shipped YAML rules, never another test's overrides."""
    ConfigService.reload()
    yield
    ConfigService.reload()


@pytest.fixture
def catalog():
    return WorkoutCatalog()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def make_profile():
    """
    Factory for valid athlete profiles.

    Defaults describe an intermediate marathoner running six days a week
    with quality on Tuesday/Thursday and the long run on Sunday.
    """
    def _make(**overrides):
        data = {
            "race_distance": "Marathon",
            "race_date": None,
            "start_date": None,
            "current_weekly_volume": 25,
            "current_long_session_distance": 6,
            "experience_level": "intermediate",
            "available_days": list(SIX_DAYS),
            "hard_session_days": ["Tuesday", "Thursday"],
            "long_session_day": "Sunday",
            "preferred_cross_train_days": [],
            "cross_train_equipment": None,
            "running_status": "active",
            "total_weeks": 19,
        }
        data.update(overrides)
        return AthleteProfile.from_dict(data)

    return _make
