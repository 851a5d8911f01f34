"""API endpoints for natural-language interpretation.

Provides REST endpoints for:
- POST /ai/evaluate (free text -> 1-5 score)
- POST /ai/weight (free text -> per-criterion weights)
- POST /ai/suggest (decision title -> options or criteria)
- POST /ai/explain (decision matrix -> explanation)

Requests missing required fields are rejected with 400 before the
collaborator is called.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.decision.ledger import clamp_rating
from src.interpretation.base import (
    InterpretationCollaborator,
    InterpretationError,
    InterpretationRequestError,
)
from src.interpretation.schemas import (
    EvaluateRequest,
    EvaluateResponse,
    ExplainRequest,
    ExplainResponse,
    SuggestRequest,
    SuggestResponse,
    WeightRequest,
    WeightResponse,
)
from src.models.decision import Score, Weight

router = APIRouter(prefix="/ai", tags=["interpretation"])


def get_collaborator() -> InterpretationCollaborator:
    """Dependency to get the interpretation collaborator from app state.

    Raises:
        HTTPException: If the collaborator is not initialized
    """
    from src.main import app

    if not hasattr(app.state, "collaborator"):
        raise HTTPException(
            status_code=503,
            detail="Interpretation collaborator not initialized",
        )
    return app.state.collaborator


def _failure(e: InterpretationError, message: str) -> HTTPException:
    if isinstance(e, InterpretationRequestError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=message)


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(
    request: EvaluateRequest,
    collaborator: Annotated[InterpretationCollaborator, Depends(get_collaborator)],
) -> EvaluateResponse:
    """Interpret a free-text evaluation of one option on one criterion."""
    try:
        return await collaborator.parse_evaluation(
            request.user_message, request.option, request.criterion
        )
    except InterpretationError as e:
        raise _failure(e, "Failed to parse evaluation") from e


@router.post("/weight", response_model=WeightResponse)
async def weight(
    request: WeightRequest,
    collaborator: Annotated[InterpretationCollaborator, Depends(get_collaborator)],
) -> WeightResponse:
    """Interpret free-text importance preferences across criteria."""
    try:
        return await collaborator.parse_weights(request.user_message, request.criteria)
    except InterpretationError as e:
        raise _failure(e, "Failed to parse weight preferences") from e


@router.post("/suggest", response_model=SuggestResponse)
async def suggest(
    request: SuggestRequest,
    collaborator: Annotated[InterpretationCollaborator, Depends(get_collaborator)],
) -> SuggestResponse:
    """Suggest options or criteria for a decision."""
    try:
        suggestions = await collaborator.suggest_items(
            request.decision_title, request.type
        )
    except InterpretationError as e:
        raise _failure(e, "Failed to generate suggestions") from e
    return SuggestResponse(suggestions=suggestions)


@router.post("/explain", response_model=ExplainResponse)
async def explain(
    request: ExplainRequest,
    collaborator: Annotated[InterpretationCollaborator, Depends(get_collaborator)],
) -> ExplainResponse:
    """Explain a decision result."""
    try:
        explanation = await collaborator.explain_result(
            request.decision_title,
            request.options,
            request.criteria,
            [
                Score(
                    option_index=s.option_index,
                    criterion_index=s.criterion_index,
                    value=clamp_rating(s.score),
                )
                for s in request.scores
            ],
            [
                Weight(criterion_index=w.criterion_index, value=clamp_rating(w.weight))
                for w in request.weights
            ],
            request.winner_index,
        )
    except InterpretationError as e:
        raise _failure(e, "Failed to generate explanation") from e
    return ExplainResponse(explanation=explanation)
