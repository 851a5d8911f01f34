"""Tests for interpretation API endpoints.

Verifies that interpretation endpoints:
- Accept camelCase request bodies
- Reject missing fields with 400 before calling the collaborator
- Map collaborator failures to 500 with a generic message
- Return 503 when the collaborator is not initialized
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.api.errors import install_error_handlers
from src.api.interpretation import get_collaborator, router
from src.interpretation.base import InterpretationError
from src.interpretation.schemas import (
    CriterionWeight,
    EvaluateResponse,
    WeightResponse,
)
from src.models.decision import SuggestionKind


@pytest.fixture
def app_with_collaborator(mock_collaborator):
    """Create test app with interpretation router and mocked collaborator."""
    test_app = FastAPI()
    install_error_handlers(test_app)
    test_app.include_router(router)

    def override_get_collaborator():
        return mock_collaborator

    test_app.dependency_overrides[get_collaborator] = override_get_collaborator
    return test_app


@pytest.fixture
def api(app_with_collaborator):
    """Create test client with mocked collaborator."""
    return TestClient(app_with_collaborator)


@pytest.fixture
def api_no_collaborator():
    """Create test client without collaborator initialized."""
    test_app = FastAPI()
    test_app.include_router(router)

    def override_missing():
        raise HTTPException(
            status_code=503, detail="Interpretation collaborator not initialized"
        )

    test_app.dependency_overrides[get_collaborator] = override_missing
    return TestClient(test_app)


EVALUATE_BODY = {"userMessage": "Really tasty", "option": "Pizza", "criterion": "Taste"}


class TestEvaluateEndpoint:
    """Tests for POST /ai/evaluate."""

    def test_returns_score(self, api, mock_collaborator):
        mock_collaborator.parse_evaluation.return_value = EvaluateResponse(
            score=5, reasoning="Loved it."
        )

        response = api.post("/ai/evaluate", json=EVALUATE_BODY)

        assert response.status_code == 200
        assert response.json() == {"score": 5, "reasoning": "Loved it."}
        mock_collaborator.parse_evaluation.assert_awaited_once_with(
            "Really tasty", "Pizza", "Taste"
        )

    def test_missing_field_is_400(self, api, mock_collaborator):
        response = api.post(
            "/ai/evaluate", json={"userMessage": "Really tasty", "option": "Pizza"}
        )

        assert response.status_code == 400
        assert "criterion" in response.json()["error"]
        mock_collaborator.parse_evaluation.assert_not_awaited()

    def test_blank_field_is_400(self, api, mock_collaborator):
        response = api.post("/ai/evaluate", json={**EVALUATE_BODY, "userMessage": " "})
        assert response.status_code == 400
        mock_collaborator.parse_evaluation.assert_not_awaited()

    def test_failure_is_500(self, api, mock_collaborator):
        mock_collaborator.parse_evaluation.side_effect = InterpretationError("boom")
        response = api.post("/ai/evaluate", json=EVALUATE_BODY)
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to parse evaluation"

    def test_503_without_collaborator(self, api_no_collaborator):
        response = api_no_collaborator.post("/ai/evaluate", json=EVALUATE_BODY)
        assert response.status_code == 503


class TestWeightEndpoint:
    """Tests for POST /ai/weight."""

    def test_returns_camel_case_weights(self, api, mock_collaborator):
        mock_collaborator.parse_weights.return_value = WeightResponse(
            weights=[CriterionWeight(criterion_index=1, weight=4, reasoning="Cost")],
            summary="Price matters.",
        )

        response = api.post(
            "/ai/weight",
            json={"userMessage": "price matters", "criteria": ["Taste", "Price"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["weights"] == [
            {"criterionIndex": 1, "weight": 4, "reasoning": "Cost"}
        ]
        assert data["summary"] == "Price matters."

    def test_empty_criteria_is_400(self, api):
        response = api.post(
            "/ai/weight", json={"userMessage": "price matters", "criteria": []}
        )
        assert response.status_code == 400

    def test_failure_is_500(self, api, mock_collaborator):
        mock_collaborator.parse_weights.side_effect = InterpretationError("boom")
        response = api.post(
            "/ai/weight", json={"userMessage": "price", "criteria": ["Price"]}
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to parse weight preferences"


class TestSuggestEndpoint:
    """Tests for POST /ai/suggest."""

    def test_returns_suggestions(self, api, mock_collaborator):
        mock_collaborator.suggest_items.return_value = ["Tacos", "Curry"]

        response = api.post(
            "/ai/suggest", json={"decisionTitle": "Dinner", "type": "options"}
        )

        assert response.status_code == 200
        assert response.json() == {"suggestions": ["Tacos", "Curry"]}
        mock_collaborator.suggest_items.assert_awaited_once_with(
            "Dinner", SuggestionKind.OPTIONS
        )

    def test_unknown_type_is_400(self, api):
        response = api.post(
            "/ai/suggest", json={"decisionTitle": "Dinner", "type": "colors"}
        )
        assert response.status_code == 400

    def test_failure_is_500(self, api, mock_collaborator):
        mock_collaborator.suggest_items.side_effect = InterpretationError("boom")
        response = api.post(
            "/ai/suggest", json={"decisionTitle": "Dinner", "type": "criteria"}
        )
        assert response.status_code == 500


class TestExplainEndpoint:
    """Tests for POST /ai/explain."""

    def _body(self, **overrides):
        body = {
            "decisionTitle": "Dinner",
            "options": ["Pizza", "Sushi"],
            "criteria": ["Taste", "Price"],
            "scores": [
                {"optionIndex": 0, "criterionIndex": 0, "score": 5},
                {"optionIndex": 1, "criterionIndex": 1, "score": 9},
            ],
            "weights": [{"criterionIndex": 0, "weight": 3}],
            "winnerIndex": 0,
        }
        body.update(overrides)
        return body

    def test_returns_explanation(self, api, mock_collaborator):
        response = api.post("/ai/explain", json=self._body())

        assert response.status_code == 200
        assert response.json() == {"explanation": "Pizza wins on taste."}
        args = mock_collaborator.explain_result.await_args.args
        assert args[0] == "Dinner"
        assert [s.value for s in args[3]] == [5, 5]
        assert args[5] == 0

    def test_winner_out_of_range_is_400(self, api, mock_collaborator):
        response = api.post("/ai/explain", json=self._body(winnerIndex=4))
        assert response.status_code == 400
        mock_collaborator.explain_result.assert_not_awaited()

    def test_missing_scores_is_400(self, api):
        body = self._body()
        del body["scores"]
        response = api.post("/ai/explain", json=body)
        assert response.status_code == 400
        assert "scores" in response.json()["error"]

    def test_failure_is_500(self, api, mock_collaborator):
        mock_collaborator.explain_result.side_effect = InterpretationError("boom")
        response = api.post("/ai/explain", json=self._body())
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate explanation"
