"""Interpretation collaborator contract.

The decision core talks to natural-language interpretation only through
this interface. Implementations may use any backend; they must raise
InterpretationError (or a subclass) for every failure so callers can
treat transport problems and unusable answers the same way.
"""

from abc import ABC, abstractmethod

from src.interpretation.schemas import EvaluateResponse, WeightResponse
from src.models.decision import Score, SuggestionKind, Weight


class InterpretationError(Exception):
    """Raised when interpretation fails for any reason."""

    pass


class InterpretationRequestError(InterpretationError):
    """Raised when a request is missing required fields.

    No interpretation work is attempted for such a request.
    """

    pass


class InterpretationCollaborator(ABC):
    """Turns free-form text into scores, weights, suggestions and explanations."""

    @abstractmethod
    async def parse_evaluation(
        self, message: str, option: str, criterion: str
    ) -> EvaluateResponse:
        """Interpret a rating of one option against one criterion.

        Returns:
            EvaluateResponse with score clamped to 1-5 (3 when absent)
        """

    @abstractmethod
    async def parse_weights(self, message: str, criteria: list[str]) -> WeightResponse:
        """Interpret importance statements for a list of criteria.

        Returned criterion indices are not range-checked here.
        """

    @abstractmethod
    async def suggest_items(
        self, decision_title: str, kind: SuggestionKind
    ) -> list[str]:
        """Suggest options or criteria for a decision."""

    @abstractmethod
    async def explain_result(
        self,
        decision_title: str,
        options: list[str],
        criteria: list[str],
        scores: list[Score],
        weights: list[Weight],
        winner_index: int,
    ) -> str:
        """Explain why the winner came out on top."""
