"""Decision session: the wizard state machine.

The session owns the decision (title, options, criteria), both
ledgers, the current step and the evaluation mode. All mutation is
synchronous. Forward moves are gated:

    input -> options      title is non-empty after trimming
    options -> criteria   at least two options
    criteria -> evaluation at least one criterion
    evaluation -> weighing every (option, criterion) pair scored
    weighing -> results   every criterion weighted

Backward moves are always allowed and change no data. Leaving a step
cancels the interpretation requests that belong to it, so responses
arriving afterwards are dropped.
"""

from uuid import UUID

import structlog

from src.decision.aggregation import breakdown, compute_result
from src.decision.errors import InvalidInputError, InvalidStepError
from src.decision.ledger import ScoreLedger, WeightLedger
from src.decision.requests import RequestPurpose, RequestTracker
from src.models.decision import (
    Decision,
    DecisionResult,
    EvaluationMode,
    ResultCell,
    Step,
    SuggestionKind,
)

logger = structlog.get_logger()

MIN_OPTIONS = 2
MIN_CRITERIA = 1

# Requests that lose their meaning once their step is left
STEP_REQUESTS: dict[Step, tuple[RequestPurpose, ...]] = {
    Step.OPTIONS: (RequestPurpose.OPTION_SUGGESTIONS,),
    Step.CRITERIA: (RequestPurpose.CRITERIA_SUGGESTIONS,),
    Step.EVALUATION: (RequestPurpose.EVALUATION,),
    Step.WEIGHING: (RequestPurpose.WEIGHING,),
    Step.RESULTS: (RequestPurpose.EXPLANATION,),
}


class DecisionSession:
    """One isolated decision-making session."""

    def __init__(self) -> None:
        self.requests = RequestTracker()
        self._start_fresh()
        self.epoch = 0

    def _start_fresh(self, decision_id: UUID | None = None) -> None:
        self.decision = Decision() if decision_id is None else Decision(id=decision_id)
        self.scores = ScoreLedger()
        self.weights = WeightLedger()
        self.step = Step.INPUT
        self.mode = EvaluationMode.MANUAL
        self.suggestions: dict[SuggestionKind, list[str]] = {}
        self.explanation: str | None = None

    @property
    def id(self) -> UUID:
        return self.decision.id

    @property
    def title(self) -> str:
        return self.decision.title

    @property
    def options(self) -> list[str]:
        return self.decision.options

    @property
    def criteria(self) -> list[str]:
        return self.decision.criteria

    # Data entry

    def set_title(self, title: str) -> None:
        """Set the decision title (input step only)."""
        self._require_step(Step.INPUT)
        self.decision.title = title.strip()
        self.decision.touch()

    def add_option(self, text: str) -> int:
        """Append an option (options step only).

        Returns:
            Index of the new option

        Raises:
            InvalidInputError: If the text is blank
        """
        self._require_step(Step.OPTIONS)
        return self._append(self.decision.options, text, "option")

    def remove_option(self, index: int) -> str:
        """Remove an option by position (options step only).

        Later options shift down by one. Existing scores are left as is.
        """
        self._require_step(Step.OPTIONS)
        return self._pop(self.decision.options, index, "option")

    def add_criterion(self, text: str) -> int:
        """Append a criterion (criteria step only)."""
        self._require_step(Step.CRITERIA)
        return self._append(self.decision.criteria, text, "criterion")

    def remove_criterion(self, index: int) -> str:
        """Remove a criterion by position (criteria step only).

        Later criteria shift down by one. Existing scores and weights
        are left as is.
        """
        self._require_step(Step.CRITERIA)
        return self._pop(self.decision.criteria, index, "criterion")

    def set_score(self, option_index: int, criterion_index: int, value: int) -> int:
        """Upsert a score for an (option, criterion) pair.

        Returns:
            The stored (clamped) value

        Raises:
            InvalidStepError: Before the evaluation step
            InvalidInputError: If either index is out of range
        """
        self._require_ledgers_open()
        self._check_index(option_index, len(self.options), "option")
        self._check_index(criterion_index, len(self.criteria), "criterion")
        return self.scores.upsert(option_index, criterion_index, value)

    def set_weight(self, criterion_index: int, value: int) -> int:
        """Upsert a weight for a criterion.

        Returns:
            The stored (clamped) value
        """
        self._require_ledgers_open()
        self._check_index(criterion_index, len(self.criteria), "criterion")
        return self.weights.upsert(criterion_index, value)

    # Completeness

    @property
    def evaluation_complete(self) -> bool:
        return self.scores.is_complete(len(self.options), len(self.criteria))

    @property
    def weighing_complete(self) -> bool:
        return self.weights.is_complete(len(self.criteria))

    def can_advance(self) -> bool:
        """Whether the guard for leaving the current step holds."""
        if self.step == Step.INPUT:
            return bool(self.title.strip())
        if self.step == Step.OPTIONS:
            return len(self.options) >= MIN_OPTIONS
        if self.step == Step.CRITERIA:
            return len(self.criteria) >= MIN_CRITERIA
        if self.step == Step.EVALUATION:
            return self.evaluation_complete
        if self.step == Step.WEIGHING:
            return self.weighing_complete
        return False

    # Transitions

    def advance(self) -> bool:
        """Move to the next step if its guard holds.

        Returns:
            True if the step changed
        """
        target = self.step.next
        if target is None or not self.can_advance():
            logger.info("advance refused", session_id=str(self.id), step=self.step.value)
            return False
        self._move(target)
        return True

    def back(self) -> bool:
        """Move to the previous step. Data is kept.

        Returns:
            True if the step changed
        """
        target = self.step.previous
        if target is None:
            return False
        self._move(target)
        return True

    def set_mode(self, mode: EvaluationMode) -> None:
        """Switch evaluation mode. Entered scores are kept."""
        if mode == self.mode:
            return
        self.requests.cancel(RequestPurpose.EVALUATION)
        self.mode = mode
        self.epoch += 1
        logger.info("evaluation mode switched", session_id=str(self.id), mode=mode.value)

    def reset(self) -> None:
        """Discard the whole decision and return to the input step."""
        self.requests.cancel()
        logger.info("session reset", session_id=str(self.id), step=self.step.value)
        # Same id so the session stays addressable after a reset
        self._start_fresh(self.id)
        self.epoch += 1

    # Results

    def result(self) -> DecisionResult:
        """Aggregate the current ledgers (partial ledgers give a preview)."""
        return compute_result(
            len(self.options), len(self.criteria), self.scores, self.weights
        )

    def cells(self) -> list[list[ResultCell]]:
        """Score x weight for every cell, rows by option."""
        return breakdown(
            len(self.options), len(self.criteria), self.scores, self.weights
        )

    # Internals

    def _move(self, target: Step) -> None:
        left = self.step
        self.requests.cancel(*STEP_REQUESTS.get(left, ()))
        if left == Step.RESULTS:
            self.explanation = None
        self.step = target
        self.epoch += 1
        logger.info(
            "step changed",
            session_id=str(self.id),
            from_step=left.value,
            to_step=target.value,
        )

    def _require_step(self, step: Step) -> None:
        if self.step != step:
            raise InvalidStepError(
                f"Only allowed in the {step.value} step (current: {self.step.value})"
            )

    def _require_ledgers_open(self) -> None:
        if self.step.position < Step.EVALUATION.position:
            raise InvalidStepError(
                f"Ratings are entered from the evaluation step on "
                f"(current: {self.step.value})"
            )

    def _append(self, items: list[str], text: str, label: str) -> int:
        cleaned = text.strip()
        if not cleaned:
            raise InvalidInputError(f"The {label} text must not be blank")
        items.append(cleaned)
        self.decision.touch()
        return len(items) - 1

    def _pop(self, items: list[str], index: int, label: str) -> str:
        self._check_index(index, len(items), label)
        removed = items.pop(index)
        self.decision.touch()
        return removed

    @staticmethod
    def _check_index(index: int, size: int, label: str) -> None:
        if not 0 <= index < size:
            raise InvalidInputError(f"No {label} at position {index}")
