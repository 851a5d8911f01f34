"""Async controller for a decision session.

DecisionWizard wraps a DecisionSession and an interpretation
collaborator. It keeps the synchronous session in charge of state and
layers the collaborator calls on top:

- entering the options or criteria step fetches suggestions in the
  background
- entering the results step fetches an explanation in the background
- conversational evaluation and weighing send one message at a time
  and, once complete, move on after a short fixed delay

Background work never blocks a transition, and its failure never
changes a guard.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

from src.config import settings
from src.decision.errors import InvalidStepError
from src.decision.evaluation import (
    ConversationalEvaluation,
    EvaluationTurn,
    ManualEvaluation,
)
from src.decision.requests import RequestPurpose, RequestState, RequestTicket
from src.decision.session import DecisionSession
from src.decision.weighing import ConversationalWeighing, WeighingTurn
from src.interpretation.base import InterpretationCollaborator
from src.models.decision import EvaluationMode, Step, SuggestionKind

logger = structlog.get_logger()

SUGGESTION_PURPOSE = {
    SuggestionKind.OPTIONS: RequestPurpose.OPTION_SUGGESTIONS,
    SuggestionKind.CRITERIA: RequestPurpose.CRITERIA_SUGGESTIONS,
}

SUGGESTION_STEP = {
    SuggestionKind.OPTIONS: Step.OPTIONS,
    SuggestionKind.CRITERIA: Step.CRITERIA,
}


def _normalize(text: str) -> str:
    return text.strip().casefold()


class DecisionWizard:
    """Drives one decision session through its steps."""

    def __init__(
        self,
        collaborator: InterpretationCollaborator,
        session: DecisionSession | None = None,
        evaluation_delay: float | None = None,
        weighing_delay: float | None = None,
        max_suggestions: int | None = None,
    ):
        """Initialize the wizard.

        Args:
            collaborator: Interpretation backend
            session: Existing session to drive (default: a fresh one)
            evaluation_delay: Seconds before leaving a completed chat evaluation
            weighing_delay: Seconds before leaving a completed chat weighing
            max_suggestions: Cap on stored suggestions per kind
        """
        self.session = session or DecisionSession()
        self._collaborator = collaborator
        self._evaluation_delay = (
            settings.evaluation_advance_delay_seconds
            if evaluation_delay is None
            else evaluation_delay
        )
        self._weighing_delay = (
            settings.weighing_advance_delay_seconds
            if weighing_delay is None
            else weighing_delay
        )
        self._max_suggestions = (
            settings.max_suggestions if max_suggestions is None else max_suggestions
        )
        self._tasks: set[asyncio.Task] = set()
        self.manual = ManualEvaluation(self.session)
        self.conversation: ConversationalEvaluation | None = None
        self.weighing: ConversationalWeighing | None = None

    # Session edits

    def set_title(self, title: str) -> None:
        self.session.set_title(title)

    def add_option(self, text: str) -> int:
        return self.session.add_option(text)

    def remove_option(self, index: int) -> str:
        return self.session.remove_option(index)

    def add_criterion(self, text: str) -> int:
        return self.session.add_criterion(text)

    def remove_criterion(self, index: int) -> str:
        return self.session.remove_criterion(index)

    def set_score(self, option_index: int, criterion_index: int, value: int) -> int:
        return self.manual.score(option_index, criterion_index, value)

    def set_weight(self, criterion_index: int, value: int) -> int:
        return self.session.set_weight(criterion_index, value)

    # Transitions

    async def advance(self) -> bool:
        """Move forward if the current step's guard holds."""
        if not self.session.advance():
            return False
        self._on_enter(self.session.step)
        return True

    async def back(self) -> bool:
        """Move back one step. Data is kept."""
        if not self.session.back():
            return False
        self._on_enter(self.session.step)
        return True

    async def reset(self) -> None:
        """Start over with an empty decision."""
        self.session.reset()
        self.conversation = None
        self.weighing = None

    def set_mode(self, mode: EvaluationMode) -> None:
        """Switch evaluation mode without touching entered scores."""
        if mode == self.session.mode:
            return
        self.session.set_mode(mode)
        self.conversation = None
        if self.session.step == Step.EVALUATION:
            self._prepare_evaluation()

    # Conversational flows

    async def send_evaluation_message(self, message: str) -> EvaluationTurn:
        """Send one free-text evaluation for the current pair.

        Raises:
            InvalidStepError: Not in conversational evaluation
            RequestInFlightError: A previous message is still pending
        """
        if (
            self.session.step != Step.EVALUATION
            or self.session.mode != EvaluationMode.CONVERSATIONAL
            or self.conversation is None
        ):
            raise InvalidStepError("Conversational evaluation is not active")
        turn = await self.conversation.submit(message, self._collaborator)
        if turn.completed:
            self._schedule_advance(Step.EVALUATION, self._evaluation_delay)
        return turn

    async def send_weighing_message(self, message: str) -> WeighingTurn:
        """Send one free-text statement about criterion importance.

        Raises:
            InvalidStepError: Not in the weighing step
            RequestInFlightError: A previous message is still pending
        """
        if self.session.step != Step.WEIGHING or self.weighing is None:
            raise InvalidStepError("Weighing is not active")
        turn = await self.weighing.submit(message, self._collaborator)
        if turn.completed:
            self._schedule_advance(Step.WEIGHING, self._weighing_delay)
        return turn

    # Suggestions and explanation

    async def refresh_suggestions(self, kind: SuggestionKind) -> list[str] | None:
        """Fetch suggestions again for the step being edited.

        Returns:
            Stored suggestions, or None if the request failed or went stale

        Raises:
            InvalidStepError: Outside the options or criteria step for the kind
            RequestInFlightError: A request for the same kind is pending
        """
        session = self.session
        if session.step != SUGGESTION_STEP[kind]:
            raise InvalidStepError(
                f"{kind.value.capitalize()} suggestions need the "
                f"{SUGGESTION_STEP[kind].value} step"
            )
        ticket = session.requests.issue(SUGGESTION_PURPOSE[kind], (session.epoch,))
        return await self._fetch_suggestions(kind, ticket)

    def addable_suggestions(self, kind: SuggestionKind) -> list[str]:
        """Suggestions not already present in the decision (case-insensitive)."""
        existing = (
            self.session.options
            if kind == SuggestionKind.OPTIONS
            else self.session.criteria
        )
        taken = {_normalize(item) for item in existing}
        addable = []
        for suggestion in self.session.suggestions.get(kind, []):
            key = _normalize(suggestion)
            if key and key not in taken:
                taken.add(key)
                addable.append(suggestion)
        return addable

    def suggestion_state(self, kind: SuggestionKind) -> RequestState | None:
        return self.session.requests.state(SUGGESTION_PURPOSE[kind])

    def explanation_state(self) -> RequestState | None:
        return self.session.requests.state(RequestPurpose.EXPLANATION)

    async def _fetch_suggestions(
        self, kind: SuggestionKind, ticket: RequestTicket
    ) -> list[str] | None:
        session = self.session
        if not session.requests.is_current(ticket):
            return None
        try:
            suggestions = await self._collaborator.suggest_items(session.title, kind)
        except asyncio.CancelledError:
            session.requests.fail(ticket, "cancelled")
            raise
        except Exception as e:
            if session.requests.fail(ticket, str(e)):
                logger.warning(
                    "suggestions unavailable",
                    session_id=str(session.id),
                    kind=kind.value,
                    error=str(e),
                )
            return None

        suggestions = suggestions[: self._max_suggestions]
        if not session.requests.resolve(ticket, suggestions):
            return None
        session.suggestions[kind] = suggestions
        return suggestions

    async def _fetch_explanation(self, ticket: RequestTicket) -> str | None:
        session = self.session
        if not session.requests.is_current(ticket):
            return None
        result = session.result()
        try:
            explanation = await self._collaborator.explain_result(
                session.title,
                list(session.options),
                list(session.criteria),
                session.scores.entries(),
                session.weights.entries(),
                result.winner_index,
            )
        except asyncio.CancelledError:
            session.requests.fail(ticket, "cancelled")
            raise
        except Exception as e:
            if session.requests.fail(ticket, str(e)):
                logger.warning(
                    "explanation unavailable", session_id=str(session.id), error=str(e)
                )
            return None

        if not session.requests.resolve(ticket, explanation):
            return None
        session.explanation = explanation
        return explanation

    # Background tasks

    async def wait_idle(self) -> None:
        """Wait for all background work to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel background work."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()

    def _on_enter(self, step: Step) -> None:
        if step in (Step.OPTIONS, Step.CRITERIA):
            kind = SuggestionKind(step.value)
            ticket = self.session.requests.issue(
                SUGGESTION_PURPOSE[kind], (self.session.epoch,)
            )
            self._spawn(self._fetch_suggestions(kind, ticket))
        elif step == Step.EVALUATION:
            self._prepare_evaluation()
        elif step == Step.WEIGHING:
            self.weighing = ConversationalWeighing(self.session)
        elif step == Step.RESULTS:
            ticket = self.session.requests.issue(
                RequestPurpose.EXPLANATION, (self.session.epoch,)
            )
            self._spawn(self._fetch_explanation(ticket))

    def _prepare_evaluation(self) -> None:
        if self.session.mode == EvaluationMode.CONVERSATIONAL:
            self.conversation = ConversationalEvaluation(self.session)
        else:
            self.conversation = None

    def _schedule_advance(self, from_step: Step, delay: float) -> None:
        self._spawn(self._advance_later(from_step, self.session.epoch, delay))

    async def _advance_later(self, from_step: Step, epoch: int, delay: float) -> None:
        await asyncio.sleep(delay)
        session = self.session
        # Skip if the user moved, switched mode or reset in the meantime
        if session.step != from_step or session.epoch != epoch:
            return
        await self.advance()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
