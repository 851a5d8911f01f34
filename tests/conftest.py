"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.decision.session import DecisionSession
from src.decision.store import SessionStore
from src.decision.wizard import DecisionWizard
from src.interpretation.base import InterpretationCollaborator
from src.interpretation.schemas import EvaluateResponse, WeightResponse
from src.main import app
from src.models.decision import Step


@pytest.fixture
def mock_collaborator():
    """Create a mock interpretation collaborator with benign defaults."""
    collaborator = MagicMock(spec=InterpretationCollaborator)
    collaborator.parse_evaluation = AsyncMock(
        return_value=EvaluateResponse(score=4, reasoning="Sounds good.")
    )
    collaborator.parse_weights = AsyncMock(
        return_value=WeightResponse(weights=[], summary="")
    )
    collaborator.suggest_items = AsyncMock(return_value=[])
    collaborator.explain_result = AsyncMock(return_value="Pizza wins on taste.")
    return collaborator


@pytest.fixture
def wizard(mock_collaborator) -> DecisionWizard:
    """Wizard with no auto-advance delay."""
    return DecisionWizard(
        mock_collaborator, evaluation_delay=0, weighing_delay=0, max_suggestions=5
    )


def build_session(
    options: list[str],
    criteria: list[str],
    step: Step = Step.EVALUATION,
    title: str = "Dinner",
) -> DecisionSession:
    """Walk a fresh session to the given step with the given lists."""
    session = DecisionSession()
    session.set_title(title)
    session.advance()
    for option in options:
        session.add_option(option)
    if step == Step.OPTIONS:
        return session
    session.advance()
    for criterion in criteria:
        session.add_criterion(criterion)
    if step == Step.CRITERIA:
        return session
    session.advance()
    return session


@pytest.fixture
def make_session():
    """Factory for sessions walked to a given step."""
    return build_session


@pytest.fixture
def evaluation_session() -> DecisionSession:
    """Two options x two criteria, sitting in the evaluation step."""
    return build_session(["Pizza", "Sushi"], ["Taste", "Price"])


@pytest.fixture
async def client(mock_collaborator) -> AsyncIterator[AsyncClient]:
    """Create async test client for FastAPI app with mocked collaborator."""
    app.state.collaborator = mock_collaborator
    app.state.session_store = SessionStore(
        mock_collaborator,
        wizard_factory=lambda c: DecisionWizard(
            c, evaluation_delay=0, weighing_delay=0
        ),
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up app state
    await app.state.session_store.close_all()
    del app.state.collaborator
    del app.state.session_store
