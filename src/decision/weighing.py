"""Conversational weighing of criteria.

The user describes what matters in their own words; the interpretation
collaborator turns that into per-criterion weights. Weights for
criteria that do not exist are ignored, the rest are stored. Once every
criterion has a weight the flow is complete.
"""

import asyncio
from dataclasses import dataclass, field

import structlog

from src.decision.errors import InvalidStepError
from src.decision.evaluation import TurnStatus
from src.decision.requests import RequestPurpose
from src.decision.session import DecisionSession
from src.interpretation.base import InterpretationCollaborator
from src.interpretation.schemas import CriterionWeight
from src.models.decision import ChatMessage, Step

logger = structlog.get_logger()

RETRY_WEIGHING_MESSAGE = (
    "Sorry, I had trouble understanding that. Could you tell me again "
    "which criteria are most important to you?"
)


@dataclass
class WeighingTurn:
    """What happened to one conversational weighing message."""

    status: TurnStatus
    applied: list[CriterionWeight] = field(default_factory=list)
    ignored: list[CriterionWeight] = field(default_factory=list)
    summary: str | None = None
    completed: bool = False


class ConversationalWeighing:
    """Chat-driven weighting of all criteria."""

    def __init__(self, session: DecisionSession):
        self._session = session
        self.messages: list[ChatMessage] = []
        criteria_list = "\n".join(
            f"{i}. {c}" for i, c in enumerate(session.criteria, 1)
        )
        self._say(
            "Now let's assign importance to each criterion. "
            f"Here are your criteria:\n\n{criteria_list}\n\n"
            "Tell me which ones matter most to you. For example: "
            '"Price and convenience are very important, but design is less '
            'critical" or "They\'re all equally important."'
        )

    @property
    def is_complete(self) -> bool:
        return self._session.weighing_complete

    async def submit(
        self, message: str, collaborator: InterpretationCollaborator
    ) -> WeighingTurn:
        """Interpret a free-text statement of criterion importance.

        Raises:
            InvalidStepError: Outside the weighing step
            RequestInFlightError: If an earlier message is still being interpreted
        """
        session = self._session
        if session.step != Step.WEIGHING:
            raise InvalidStepError("Weighing messages need the weighing step")

        criteria = list(session.criteria)
        ticket = session.requests.issue(RequestPurpose.WEIGHING, (session.epoch,))
        self.messages.append(ChatMessage(role="user", content=message))

        try:
            interpretation = await collaborator.parse_weights(message, criteria)
        except asyncio.CancelledError:
            session.requests.fail(ticket, "cancelled")
            raise
        except Exception as e:
            if not session.requests.fail(ticket, str(e)):
                return WeighingTurn(TurnStatus.STALE)
            logger.warning(
                "weights not understood", session_id=str(session.id), error=str(e)
            )
            self._say(RETRY_WEIGHING_MESSAGE)
            return WeighingTurn(TurnStatus.RETRY)

        if not session.requests.resolve(ticket, interpretation):
            return WeighingTurn(TurnStatus.STALE)

        applied: list[CriterionWeight] = []
        ignored: list[CriterionWeight] = []
        for item in interpretation.weights:
            if 0 <= item.criterion_index < len(criteria):
                stored = session.set_weight(item.criterion_index, item.weight)
                applied.append(item.model_copy(update={"weight": stored}))
            else:
                ignored.append(item)

        if ignored:
            logger.info(
                "out of range weights ignored",
                session_id=str(session.id),
                indices=[w.criterion_index for w in ignored],
            )

        if not applied:
            self._say(RETRY_WEIGHING_MESSAGE)
            return WeighingTurn(TurnStatus.RETRY, ignored=ignored)

        lines = "\n".join(
            f"• {criteria[w.criterion_index]}: {w.weight}/5"
            + (f" - {w.reasoning}" if w.reasoning else "")
            for w in applied
        )
        summary = interpretation.summary
        if self.is_complete:
            self._say(
                f"Perfect! Here's how I've weighted your criteria:\n\n{lines}\n\n"
                f"{summary}\n\nReady to see your results!"
            )
        else:
            missing = [
                c for i, c in enumerate(criteria) if session.weights.get(i) is None
            ]
            self._say(
                f"Here's how I've weighted your criteria so far:\n\n{lines}\n\n"
                f"{summary}\n\nHow important are these to you: "
                f"{', '.join(missing)}?"
            )

        return WeighingTurn(
            TurnStatus.ACCEPTED,
            applied=applied,
            ignored=ignored,
            summary=summary,
            completed=self.is_complete,
        )

    def _say(self, content: str) -> None:
        self.messages.append(ChatMessage(role="assistant", content=content))
