"""API endpoints for decision sessions.

Exposes the wizard over REST. Every mutating endpoint returns the
session snapshot so clients can render the current step without a
second request. Suggestions and explanations are fetched in the
background and show up in later snapshots.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from src.api.errors import session_errors
from src.decision.evaluation import TurnStatus
from src.decision.requests import RequestState
from src.decision.store import SessionStore
from src.decision.wizard import DecisionWizard
from src.models.decision import (
    ChatMessage,
    DecisionResult,
    EvaluationMode,
    ResultCell,
    Score,
    Step,
    SuggestionKind,
    Weight,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


# Request bodies


class TitleRequest(BaseModel):
    title: str


class ItemRequest(BaseModel):
    text: str


class ModeRequest(BaseModel):
    mode: EvaluationMode


class ScoreRequest(BaseModel):
    option_index: int
    criterion_index: int
    value: int = Field(description="Clamped to 1-5 when stored")


class WeightUpdateRequest(BaseModel):
    criterion_index: int
    value: int = Field(description="Clamped to 1-5 when stored")


class MessageRequest(BaseModel):
    message: str = Field(min_length=1)


# Responses


class Progress(BaseModel):
    done: int
    total: int


class SuggestionInfo(BaseModel):
    state: RequestState | None
    addable: list[str]


class SessionSnapshot(BaseModel):
    """Everything a client needs to render the current step."""

    id: UUID
    step: Step
    created_at: datetime
    updated_at: datetime
    title: str
    options: list[str]
    criteria: list[str]
    mode: EvaluationMode
    scores: list[Score]
    weights: list[Weight]
    can_advance: bool
    evaluation_progress: Progress
    current_pair: tuple[int, int] | None = None
    evaluation_messages: list[ChatMessage] = Field(default_factory=list)
    weighing_messages: list[ChatMessage] = Field(default_factory=list)
    suggestions: dict[SuggestionKind, SuggestionInfo] = Field(default_factory=dict)
    preview: DecisionResult | None = None
    explanation: str | None = None
    explanation_state: RequestState | None = None


class TransitionResponse(BaseModel):
    moved: bool
    session: SessionSnapshot


class EvaluationTurnResponse(BaseModel):
    status: TurnStatus
    option_index: int
    criterion_index: int
    score: int | None
    reasoning: str | None
    completed: bool
    session: SessionSnapshot


class WeighingTurnResponse(BaseModel):
    status: TurnStatus
    applied: list[Weight]
    ignored_indices: list[int]
    summary: str | None
    completed: bool
    session: SessionSnapshot


class ResultResponse(BaseModel):
    title: str
    options: list[str]
    criteria: list[str]
    weighted_totals: list[int]
    max_possible_total: int
    winner_index: int
    winner: str
    cells: list[list[ResultCell]] = Field(
        description="score x weight per option (rows) and criterion (columns)"
    )
    explanation: str | None
    explanation_state: RequestState | None


def get_session_store() -> SessionStore:
    """Dependency to get SessionStore instance from app state.

    Raises:
        HTTPException: If store not initialized
    """
    from src.main import app

    if not hasattr(app.state, "session_store"):
        raise HTTPException(status_code=503, detail="SessionStore not initialized")
    return app.state.session_store


Store = Annotated[SessionStore, Depends(get_session_store)]


def _wizard(store: SessionStore, session_id: UUID) -> DecisionWizard:
    with session_errors():
        return store.get(session_id)


def _to_snapshot(wizard: DecisionWizard) -> SessionSnapshot:
    """Convert a wizard's state to an API snapshot."""
    session = wizard.session
    conversation = wizard.conversation
    if conversation is not None:
        done, total = conversation.progress()
    else:
        done, total = wizard.manual.progress()

    preview = None
    if session.options and session.criteria:
        preview = session.result()

    return SessionSnapshot(
        id=session.id,
        created_at=session.decision.created_at,
        updated_at=session.decision.updated_at,
        step=session.step,
        title=session.title,
        options=list(session.options),
        criteria=list(session.criteria),
        mode=session.mode,
        scores=session.scores.entries(),
        weights=session.weights.entries(),
        can_advance=session.can_advance(),
        evaluation_progress=Progress(done=done, total=total),
        current_pair=conversation.current_pair() if conversation else None,
        evaluation_messages=list(conversation.messages) if conversation else [],
        weighing_messages=list(wizard.weighing.messages) if wizard.weighing else [],
        suggestions={
            kind: SuggestionInfo(
                state=wizard.suggestion_state(kind),
                addable=wizard.addable_suggestions(kind),
            )
            for kind in SuggestionKind
        },
        preview=preview,
        explanation=session.explanation,
        explanation_state=wizard.explanation_state(),
    )


@router.post("", response_model=SessionSnapshot, status_code=201)
async def create_session(store: Store) -> SessionSnapshot:
    """Start a new, empty decision session."""
    return _to_snapshot(store.create())


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: UUID, store: Store) -> SessionSnapshot:
    return _to_snapshot(_wizard(store, session_id))


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: UUID, store: Store) -> Response:
    with session_errors():
        await store.discard(session_id)
    return Response(status_code=204)


@router.put("/{session_id}/title", response_model=SessionSnapshot)
async def set_title(
    session_id: UUID, request: TitleRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.set_title(request.title)
    return _to_snapshot(wizard)


@router.post("/{session_id}/options", response_model=SessionSnapshot)
async def add_option(
    session_id: UUID, request: ItemRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.add_option(request.text)
    return _to_snapshot(wizard)


@router.delete("/{session_id}/options/{index}", response_model=SessionSnapshot)
async def remove_option(session_id: UUID, index: int, store: Store) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.remove_option(index)
    return _to_snapshot(wizard)


@router.post("/{session_id}/criteria", response_model=SessionSnapshot)
async def add_criterion(
    session_id: UUID, request: ItemRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.add_criterion(request.text)
    return _to_snapshot(wizard)


@router.delete("/{session_id}/criteria/{index}", response_model=SessionSnapshot)
async def remove_criterion(
    session_id: UUID, index: int, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.remove_criterion(index)
    return _to_snapshot(wizard)


@router.post("/{session_id}/suggestions/{kind}", response_model=SessionSnapshot)
async def refresh_suggestions(
    session_id: UUID, kind: SuggestionKind, store: Store
) -> SessionSnapshot:
    """Ask again for options or criteria suggestions in their step."""
    wizard = _wizard(store, session_id)
    with session_errors():
        await wizard.refresh_suggestions(kind)
    return _to_snapshot(wizard)


@router.post("/{session_id}/advance", response_model=TransitionResponse)
async def advance(session_id: UUID, store: Store) -> TransitionResponse:
    """Move forward. A failed guard is not an error: moved is false."""
    wizard = _wizard(store, session_id)
    moved = await wizard.advance()
    return TransitionResponse(moved=moved, session=_to_snapshot(wizard))


@router.post("/{session_id}/back", response_model=TransitionResponse)
async def back(session_id: UUID, store: Store) -> TransitionResponse:
    wizard = _wizard(store, session_id)
    moved = await wizard.back()
    return TransitionResponse(moved=moved, session=_to_snapshot(wizard))


@router.post("/{session_id}/reset", response_model=SessionSnapshot)
async def reset(session_id: UUID, store: Store) -> SessionSnapshot:
    """Discard the decision and start again at the input step."""
    wizard = _wizard(store, session_id)
    await wizard.reset()
    return _to_snapshot(wizard)


@router.put("/{session_id}/mode", response_model=SessionSnapshot)
async def set_mode(
    session_id: UUID, request: ModeRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    wizard.set_mode(request.mode)
    return _to_snapshot(wizard)


@router.put("/{session_id}/scores", response_model=SessionSnapshot)
async def set_score(
    session_id: UUID, request: ScoreRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.set_score(request.option_index, request.criterion_index, request.value)
    return _to_snapshot(wizard)


@router.put("/{session_id}/weights", response_model=SessionSnapshot)
async def set_weight(
    session_id: UUID, request: WeightUpdateRequest, store: Store
) -> SessionSnapshot:
    wizard = _wizard(store, session_id)
    with session_errors():
        wizard.set_weight(request.criterion_index, request.value)
    return _to_snapshot(wizard)


@router.post(
    "/{session_id}/evaluation/messages", response_model=EvaluationTurnResponse
)
async def send_evaluation_message(
    session_id: UUID, request: MessageRequest, store: Store
) -> EvaluationTurnResponse:
    """Send a free-text evaluation for the current (option, criterion) pair."""
    wizard = _wizard(store, session_id)
    with session_errors():
        turn = await wizard.send_evaluation_message(request.message)
    return EvaluationTurnResponse(
        status=turn.status,
        option_index=turn.option_index,
        criterion_index=turn.criterion_index,
        score=turn.score,
        reasoning=turn.reasoning,
        completed=turn.completed,
        session=_to_snapshot(wizard),
    )


@router.post("/{session_id}/weighing/messages", response_model=WeighingTurnResponse)
async def send_weighing_message(
    session_id: UUID, request: MessageRequest, store: Store
) -> WeighingTurnResponse:
    """Send a free-text statement about which criteria matter most."""
    wizard = _wizard(store, session_id)
    with session_errors():
        turn = await wizard.send_weighing_message(request.message)
    return WeighingTurnResponse(
        status=turn.status,
        applied=[
            Weight(criterion_index=w.criterion_index, value=w.weight)
            for w in turn.applied
        ],
        ignored_indices=[w.criterion_index for w in turn.ignored],
        summary=turn.summary,
        completed=turn.completed,
        session=_to_snapshot(wizard),
    )


@router.get("/{session_id}/result", response_model=ResultResponse)
async def get_result(session_id: UUID, store: Store) -> ResultResponse:
    """Weighted totals and winner. Only available in the results step."""
    wizard = _wizard(store, session_id)
    session = wizard.session
    if session.step != Step.RESULTS:
        raise HTTPException(
            status_code=409, detail="Results are available in the results step"
        )
    result = session.result()
    return ResultResponse(
        title=session.title,
        options=list(session.options),
        criteria=list(session.criteria),
        weighted_totals=result.weighted_totals,
        max_possible_total=result.max_possible_total,
        winner_index=result.winner_index,
        winner=session.options[result.winner_index],
        cells=session.cells(),
        explanation=session.explanation,
        explanation_state=wizard.explanation_state(),
    )
