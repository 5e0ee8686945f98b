"""
Plan Engine API Tests

Request/response contract for /v1/plans.
"""

import pytest


class TestGenerateEndpoint:

    def test_generate_plan(self, client, profile_payload):
        response = client.post("/v1/plans/generate", json=profile_payload)
        assert response.status_code == 200, response.text

        data = response.json()
        assert data["plan_overview"]["total_weeks"] == 16
        assert len(data["weeks"]) == 16
        assert all(len(w["days"]) == 7 for w in data["weeks"])
        assert data["pace_mode"] == "unavailable"
        assert data["degraded"] is True

    def test_seed_makes_plans_reproducible(self, client, profile_payload):
        first = client.post("/v1/plans/generate", json=profile_payload).json()
        second = client.post("/v1/plans/generate", json=profile_payload).json()
        assert first["weeks"] == second["weeks"]

    def test_race_date_places_race_day(self, client, profile_payload):
        payload = dict(profile_payload, race_distance="Half", total_weeks=12, race_date="2026-05-03")
        data = client.post("/v1/plans/generate", json=payload).json()

        sunday = data["weeks"][-1]["days"][6]
        assert sunday["role"] == "Race"
        assert sunday["distance"] == 13.1
        assert sunday["date"] == "2026-05-03"

    def test_invalid_day_reports_field(self, client, profile_payload):
        payload = dict(profile_payload, long_session_day="Friday")
        response = client.post("/v1/plans/generate", json=payload)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_LONG_SESSION_DAY"

    def test_unsupported_distance(self, client, profile_payload):
        payload = dict(profile_payload, race_distance="Ultra")
        response = client.post("/v1/plans/generate", json=payload)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_RACE_DISTANCE"

    def test_plan_too_long(self, client, profile_payload):
        payload = dict(profile_payload, total_weeks=40)
        response = client.post("/v1/plans/generate", json=payload)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_TOTAL_WEEKS"

    def test_volume_too_low_for_long_session(self, client, profile_payload):
        """10 mi/week cannot carry a marathon 20-miler in 16 weeks."""
        payload = dict(profile_payload, current_weekly_volume=10, current_long_session_distance=3)
        response = client.post("/v1/plans/generate", json=payload)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_CURRENT_WEEKLY_VOLUME"

    def test_missing_required_field(self, client, profile_payload):
        payload = dict(profile_payload)
        del payload["current_weekly_volume"]
        response = client.post("/v1/plans/generate", json=payload)
        assert response.status_code == 422


class TestTransformEndpoints:

    @pytest.fixture
    def weeks(self, client, profile_payload):
        return client.post("/v1/plans/generate", json=profile_payload).json()["weeks"]

    def test_race_day(self, client, weeks):
        response = client.post("/v1/plans/race-day", json={
            "weeks": weeks,
            "race_distance": "Marathon",
            "race_date": "2026-06-07",
            "long_session_day": "Sunday",
        })
        assert response.status_code == 200, response.text

        final = response.json()["weeks"][-1]
        sunday = next(d for d in final["days"] if d["day"] == "Sunday")
        assert sunday["role"] == "Race"
        assert sunday["distance"] == 26.2
        assert "Race week" in final["notes"]

    def test_race_day_without_sessions(self, client, weeks):
        final = weeks[-1]
        for day in final["days"]:
            day.update(role="Rest", workout_type="rest", distance=None)
        response = client.post("/v1/plans/race-day", json={"weeks": [final], "race_distance": "5K"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "PLAN_GENERATION_FAILED"

    def test_injury_recovery_and_revert(self, client, weeks):
        response = client.post("/v1/plans/injury-recovery", json={
            "weeks": weeks,
            "start_week": 5,
            "duration_weeks": 2,
            "reduce_by_days": 1,
            "equipment": ["pool", "rowing"],
            "seed": 7,
        })
        assert response.status_code == 200, response.text

        result = response.json()
        assert result["injury_weeks"] == [5, 6]
        assert result["return_week"] == 7
        week_5 = result["weeks"][4]
        assert not any(d["role"] in ("LongSession", "HardSession", "EasySession") for d in week_5["days"])

        reverted = client.post("/v1/plans/injury-recovery/revert", json={
            "weeks": result["weeks"],
            "original_weeks": result["original_weeks"],
        })
        assert reverted.status_code == 200
        assert reverted.json()["weeks"] == weeks

    def test_injury_recovery_bad_start_week(self, client, weeks):
        response = client.post("/v1/plans/injury-recovery", json={
            "weeks": weeks,
            "start_week": 30,
            "duration_weeks": 2,
            "equipment": ["pool"],
        })
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_START_WEEK"

    def test_malformed_weeks(self, client):
        response = client.post("/v1/plans/race-day", json={
            "weeks": [{"week_number": 1}],
            "race_distance": "5K",
        })
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_WEEKS"


class TestOptionsAndHealth:

    def test_options(self, client):
        data = client.get("/v1/plans/options").json()

        assert data["race_distances"] == ["5K", "10K", "Half", "Marathon"]
        assert "stand_up_bike" in data["equipment"]
        assert data["sessions_per_week"]["Marathon"] == [4, 5, 6, 7]
        assert data["plan_weeks"] == {"min": 1, "max": 30}

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
