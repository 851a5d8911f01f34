"""In-memory registry of decision sessions.

Each session is isolated; nothing is shared between them and nothing
outlives the process.
"""

from collections.abc import Callable
from uuid import UUID

import structlog

from src.decision.errors import SessionNotFoundError
from src.decision.wizard import DecisionWizard
from src.interpretation.base import InterpretationCollaborator

logger = structlog.get_logger()


class SessionStore:
    """Creates, looks up and discards wizards by session id."""

    def __init__(
        self,
        collaborator: InterpretationCollaborator,
        wizard_factory: Callable[[InterpretationCollaborator], DecisionWizard]
        | None = None,
    ):
        """Initialize the store.

        Args:
            collaborator: Interpretation backend shared by all wizards
            wizard_factory: Optional factory for wizards (for tests)
        """
        self._collaborator = collaborator
        self._factory = wizard_factory or DecisionWizard
        self._wizards: dict[UUID, DecisionWizard] = {}

    def create(self) -> DecisionWizard:
        """Start a new session."""
        wizard = self._factory(self._collaborator)
        self._wizards[wizard.session.id] = wizard
        logger.info("session created", session_id=str(wizard.session.id))
        return wizard

    def get(self, session_id: UUID) -> DecisionWizard:
        """Look up a session.

        Raises:
            SessionNotFoundError: If the id is unknown
        """
        try:
            return self._wizards[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session {session_id} not found") from None

    async def discard(self, session_id: UUID) -> None:
        """Close and forget a session."""
        wizard = self.get(session_id)
        await wizard.close()
        del self._wizards[session_id]
        logger.info("session discarded", session_id=str(session_id))

    async def close_all(self) -> None:
        for session_id in list(self._wizards):
            await self.discard(session_id)

    def __len__(self) -> int:
        return len(self._wizards)
