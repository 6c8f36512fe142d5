"""
Integration tests for the HTTP API in main.py.

Uses FastAPI's TestClient against an app built around an isolated service.
"""

import pytest
from fastapi.testclient import TestClient

import main
from main import create_app
from questionnaire_validation import ErrorCode
from validation_service import ValidationService, ValidationServiceOptions


@pytest.fixture
def service():
    return ValidationService(ValidationServiceOptions(validation_throttle_seconds=0.01))


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as test_client:
        yield test_client


class TestValidationEndpoints:
    """Tests for the /api/validate routes."""

    def test_validate_questionnaire_when_schema_valid_then_result_shape(self, client, schema_doc):
        # Act
        response = client.post("/api/validate/questionnaire", json={"schema": schema_doc})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["isValid"] is True
        assert set(body) == {"isValid", "errors", "warnings", "completionStatus"}
        assert body["completionStatus"]["totalRequiredQuestions"] == 2

    def test_validate_questionnaire_when_schema_missing_then_null_data_not_http_error(self, client):
        response = client.post("/api/validate/questionnaire", json={})

        assert response.status_code == 200
        assert response.json()["errors"][0]["code"] == ErrorCode.NULL_DATA

    def test_validate_responses_when_option_invalid_then_error_tagged(self, client, schema_doc, complete_responses):
        complete_responses["c1"]["q2"] = "C"

        response = client.post(
            "/api/validate/responses",
            json={"schema": schema_doc, "responses": complete_responses},
        )

        error = response.json()["errors"][0]
        assert error["code"] == ErrorCode.INVALID_OPTION_VALUE
        assert error["question"] == "q2"

    def test_validate_responses_when_real_time_then_debounced_result_returned(
        self, client, service, schema_doc, complete_responses
    ):
        response = client.post(
            "/api/validate/responses",
            json={"schema": schema_doc, "responses": complete_responses, "entityId": "a1", "realTime": True},
        )

        assert response.json()["isValid"] is True
        assert service.scheduler.runs_started == 1

    def test_validate_category_when_posted_then_scoped_result(self, client, schema_doc):
        response = client.post(
            "/api/validate/category",
            json={"schema": schema_doc, "categoryId": "c2", "responses": {"q5": "VMs"}},
        )

        body = response.json()
        assert body["isValid"] is True
        assert body["completionStatus"]["categoryCompletions"] == {"c2": 100.0}

    def test_validate_category_when_category_id_missing_then_422(self, client, schema_doc):
        response = client.post("/api/validate/category", json={"schema": schema_doc, "responses": {}})

        assert response.status_code == 422

    def test_validate_completion_when_half_answered_then_invalid(self, client, schema_doc, partial_responses):
        response = client.post(
            "/api/validate/completion",
            json={"schema": schema_doc, "responses": partial_responses},
        )

        body = response.json()
        assert body["isValid"] is False
        assert [e["code"] for e in body["errors"]] == [ErrorCode.INCOMPLETE_REQUIRED_QUESTIONS]
        assert body["completionStatus"]["overallCompletion"] == 50

    def test_validate_summary_when_complete_then_overall_block(self, client, schema_doc, complete_responses):
        response = client.post(
            "/api/validate/summary",
            json={"schema": schema_doc, "assessment": {"id": "a1", "responses": complete_responses}},
        )

        body = response.json()
        assert set(body) == {"questionnaire", "responses", "completion", "overall"}
        assert body["overall"]["isValid"] is True
        assert body["overall"]["completionPercentage"] == 100

    def test_progress_when_posted_then_rows_per_category(self, client, schema_doc, partial_responses):
        response = client.post(
            "/api/progress",
            json={"schema": schema_doc, "responses": partial_responses},
        )

        rows = response.json()["categories"]
        assert [row["categoryId"] for row in rows] == ["c1", "c2"]
        assert [row["status"] for row in rows] == ["completed", "not_started"]
        assert rows[0]["totalQuestions"] == 4

    def test_progress_when_table_raises_then_500_with_detail(self, client, schema_doc, monkeypatch):
        def broken_table(responses, schema):
            raise RuntimeError("table broke")

        monkeypatch.setattr(main, "completion_table", broken_table)

        response = client.post("/api/progress", json={"schema": schema_doc, "responses": {}})

        assert response.status_code == 500
        assert response.json()["detail"] == "Progress failed: table broke"


class TestCacheAndSchedulingEndpoints:
    """Tests for cache, cancel and stats routes."""

    def test_clear_entity_cache_when_entries_exist_then_removed_count(self, client, schema_doc, complete_responses):
        client.post(
            "/api/validate/completion",
            json={"schema": schema_doc, "responses": complete_responses, "entityId": "a1"},
        )

        response = client.delete("/api/validate/cache/a1")

        assert response.json() == {"success": True, "removed": 1}

    def test_clear_cache_when_called_then_stats_show_empty(self, client, schema_doc):
        client.post("/api/validate/questionnaire", json={"schema": schema_doc})

        client.delete("/api/validate/cache")
        stats = client.get("/api/validate/stats").json()

        assert stats["cacheSize"] == 0
        assert stats["activeThrottles"] == 0

    def test_cancel_when_nothing_pending_then_false(self, client):
        response = client.post("/api/validate/cancel/a1")

        assert response.json() == {"cancelled": False}


class TestMiscEndpoints:
    """Tests for configuration and health routes."""

    def test_health_when_called_then_healthy(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_kinds_config_when_called_then_lists_kinds(self, client):
        body = client.get("/api/config/kinds").json()

        assert body["choiceKinds"] == ["checkbox", "radio", "select"]
        assert body["expectedCategoryCounts"] == {"EXPLORATORY": 5, "MIGRATION": 6}
