"""Evaluation modes: how the score ledger gets filled.

Manual: any pair, any order, freely revisable.

Conversational: pairs are walked in row-major order (all criteria of
option 0, then option 1, ...). Each user message is sent to the
interpretation collaborator together with the current pair. A good
answer is stored and the walk moves on; a failed one leaves the ledger
and the position untouched and asks the user to rephrase. Only one
request is outstanding at a time.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

import structlog

from src.decision.errors import InvalidStepError
from src.decision.requests import RequestPurpose
from src.decision.session import DecisionSession
from src.interpretation.base import InterpretationCollaborator
from src.models.decision import ChatMessage, Step

logger = structlog.get_logger()

RETRY_EVALUATION_MESSAGE = (
    "Sorry, I had trouble understanding that. Could you rephrase your evaluation?"
)


class TurnStatus(str, Enum):
    """Outcome of one conversational message."""

    ACCEPTED = "accepted"
    RETRY = "retry"
    STALE = "stale"


@dataclass
class EvaluationTurn:
    """What happened to one conversational evaluation message."""

    status: TurnStatus
    option_index: int
    criterion_index: int
    score: int | None = None
    reasoning: str | None = None
    completed: bool = False


class ManualEvaluation:
    """Direct numeric scoring in any order."""

    def __init__(self, session: DecisionSession):
        self._session = session

    def score(self, option_index: int, criterion_index: int, value: int) -> int:
        """Set or overwrite one score. Returns the stored value."""
        return self._session.set_score(option_index, criterion_index, value)

    def progress(self) -> tuple[int, int]:
        """(scores entered, scores needed)."""
        session = self._session
        return session.scores.count(), len(session.options) * len(session.criteria)

    @property
    def is_complete(self) -> bool:
        return self._session.evaluation_complete


class ConversationalEvaluation:
    """Sequential, chat-driven scoring of every (option, criterion) pair.

    The walk starts at the first pair without a score, so switching in
    from manual mode keeps what was already entered.
    """

    def __init__(self, session: DecisionSession):
        self._session = session
        self.position = self._first_unscored()
        self.messages: list[ChatMessage] = []
        if not self.is_complete:
            option, criterion = self._pair_text(self.position)
            self._say(
                f'Let\'s evaluate "{option}" based on "{criterion}".\n\n'
                "How would you rate this? Feel free to describe in your own words."
            )

    @property
    def total(self) -> int:
        return len(self._session.options) * len(self._session.criteria)

    @property
    def is_complete(self) -> bool:
        return self.position >= self.total

    def pair_at(self, index: int) -> tuple[int, int]:
        """Row-major (option index, criterion index) for a sequence index."""
        width = len(self._session.criteria)
        return index // width, index % width

    def current_pair(self) -> tuple[int, int] | None:
        if self.is_complete:
            return None
        return self.pair_at(self.position)

    def progress(self) -> tuple[int, int]:
        """(pairs done, pairs in total)."""
        return min(self.position, self.total), self.total

    async def submit(
        self, message: str, collaborator: InterpretationCollaborator
    ) -> EvaluationTurn:
        """Interpret a free-text rating for the current pair.

        Args:
            message: The user's words about the current pair
            collaborator: Interpretation backend

        Returns:
            EvaluationTurn describing the outcome

        Raises:
            InvalidStepError: Outside the evaluation step or after the last pair
            RequestInFlightError: If an earlier message is still being interpreted
        """
        session = self._session
        if session.step != Step.EVALUATION:
            raise InvalidStepError("Evaluation messages need the evaluation step")
        if self.is_complete:
            raise InvalidStepError("All evaluations are already complete")

        position = self.position
        option_index, criterion_index = self.pair_at(position)
        ticket = session.requests.issue(
            RequestPurpose.EVALUATION, (session.epoch, position)
        )
        self.messages.append(ChatMessage(role="user", content=message))
        option, criterion = self._pair_text(position)

        try:
            interpretation = await collaborator.parse_evaluation(
                message, option, criterion
            )
        except asyncio.CancelledError:
            session.requests.fail(ticket, "cancelled")
            raise
        except Exception as e:
            if not session.requests.fail(ticket, str(e)):
                return EvaluationTurn(TurnStatus.STALE, option_index, criterion_index)
            logger.warning(
                "evaluation not understood",
                session_id=str(session.id),
                position=position,
                error=str(e),
            )
            self._say(RETRY_EVALUATION_MESSAGE)
            return EvaluationTurn(TurnStatus.RETRY, option_index, criterion_index)

        if not session.requests.resolve(ticket, interpretation):
            return EvaluationTurn(TurnStatus.STALE, option_index, criterion_index)

        stored = session.set_score(option_index, criterion_index, interpretation.score)
        self.position = position + 1
        reasoning = interpretation.reasoning or ""

        if self.is_complete:
            self._say(
                f"Perfect! Scored {stored}/5. {reasoning}\n\n"
                "All evaluations complete! Ready to move to weighting."
            )
        else:
            next_option, next_criterion = self._pair_text(self.position)
            self._say(
                f"Got it! Scored {stored}/5. {reasoning}\n\n"
                f'Next: Let\'s evaluate "{next_option}" based on "{next_criterion}".'
                "\n\nHow would you rate this?"
            )

        logger.info(
            "evaluation scored",
            session_id=str(session.id),
            position=position,
            score=stored,
        )
        return EvaluationTurn(
            TurnStatus.ACCEPTED,
            option_index,
            criterion_index,
            score=stored,
            reasoning=reasoning,
            completed=self.is_complete,
        )

    def _first_unscored(self) -> int:
        for index in range(self.total):
            if self._session.scores.get(*self.pair_at(index)) is None:
                return index
        return self.total

    def _pair_text(self, index: int) -> tuple[str, str]:
        option_index, criterion_index = self.pair_at(index)
        return (
            self._session.options[option_index],
            self._session.criteria[criterion_index],
        )

    def _say(self, content: str) -> None:
        self.messages.append(ChatMessage(role="assistant", content=content))
