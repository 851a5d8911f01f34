"""Interpretation collaborator backed by an LLM client.

Builds prompts for each operation, extracts structured output through
the configured LLM client, and normalizes the answer:
- scores and weights are clamped to 1-5, defaulting to 3 when absent
- empty reasoning and summaries get a generic fallback
- suggestions are trimmed and blank entries dropped
"""

from typing import Protocol, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from src.decision.ledger import clamp_rating
from src.interpretation.base import (
    InterpretationCollaborator,
    InterpretationError,
    InterpretationRequestError,
)
from src.interpretation.prompts import (
    CRITERIA_SUGGESTION_PROMPT,
    EVALUATION_PROMPT,
    EVALUATION_SYSTEM_PROMPT,
    EXPLANATION_SYSTEM_PROMPT,
    OPTION_SUGGESTION_PROMPT,
    WEIGHTING_PROMPT,
    WEIGHTING_SYSTEM_PROMPT,
)
from src.interpretation.schemas import (
    CriterionWeight,
    EvaluateRequest,
    EvaluateResponse,
    EvaluationOutput,
    ExplainRequest,
    ExplanationOutput,
    ScoreEntry,
    SuggestionsOutput,
    SuggestRequest,
    WeightEntry,
    WeightingOutput,
    WeightRequest,
    WeightResponse,
)
from src.models.decision import Score, SuggestionKind, Weight
from src.services.llm_client import LLMClientError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

DEFAULT_EVALUATION_REASONING = "Score assigned based on your evaluation."
DEFAULT_WEIGHTING_SUMMARY = "Weights assigned based on your preferences."


class StructuredLLM(Protocol):
    """Anything with the LLM client ``extract`` coroutine."""

    async def extract(
        self, prompt: str, response_model: type[T], system: str | None = None
    ) -> T: ...


def _validate(model: type[T], **data) -> T:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InterpretationRequestError(str(e)) from e


class LLMInterpreter(InterpretationCollaborator):
    """Interpretation collaborator that delegates to a language model."""

    def __init__(self, llm_client: StructuredLLM):
        """Initialize with LLM client.

        Args:
            llm_client: Client exposing ``extract`` (Anthropic or OpenAI)
        """
        self._llm = llm_client

    async def parse_evaluation(
        self, message: str, option: str, criterion: str
    ) -> EvaluateResponse:
        request = _validate(
            EvaluateRequest, user_message=message, option=option, criterion=criterion
        )
        prompt = EVALUATION_PROMPT.format(
            option=request.option,
            criterion=request.criterion,
            user_message=request.user_message,
        )
        output = await self._extract(
            prompt, EvaluationOutput, system=EVALUATION_SYSTEM_PROMPT
        )
        return EvaluateResponse(
            score=clamp_rating(output.score),
            reasoning=output.reasoning or DEFAULT_EVALUATION_REASONING,
        )

    async def parse_weights(self, message: str, criteria: list[str]) -> WeightResponse:
        request = _validate(WeightRequest, user_message=message, criteria=criteria)
        criteria_list = "\n".join(f"{i}. {c}" for i, c in enumerate(request.criteria))
        prompt = WEIGHTING_PROMPT.format(
            criteria_list=criteria_list, user_message=request.user_message
        )
        output = await self._extract(
            prompt, WeightingOutput, system=WEIGHTING_SYSTEM_PROMPT
        )
        return WeightResponse(
            weights=[
                CriterionWeight(
                    criterion_index=item.criterion_index,
                    weight=clamp_rating(item.weight),
                    reasoning=item.reasoning or "",
                )
                for item in output.weights
            ],
            summary=output.summary or DEFAULT_WEIGHTING_SUMMARY,
        )

    async def suggest_items(
        self, decision_title: str, kind: SuggestionKind
    ) -> list[str]:
        request = _validate(SuggestRequest, decision_title=decision_title, type=kind)
        template = (
            OPTION_SUGGESTION_PROMPT
            if request.type == SuggestionKind.OPTIONS
            else CRITERIA_SUGGESTION_PROMPT
        )
        prompt = template.format(decision_title=request.decision_title)
        output = await self._extract(prompt, SuggestionsOutput)
        return [s.strip() for s in output.suggestions if s and s.strip()]

    async def explain_result(
        self,
        decision_title: str,
        options: list[str],
        criteria: list[str],
        scores: list[Score],
        weights: list[Weight],
        winner_index: int,
    ) -> str:
        request = _validate(
            ExplainRequest,
            decision_title=decision_title,
            options=options,
            criteria=criteria,
            scores=[
                ScoreEntry(
                    option_index=s.option_index,
                    criterion_index=s.criterion_index,
                    score=s.value,
                )
                for s in scores
            ],
            weights=[
                WeightEntry(criterion_index=w.criterion_index, weight=w.value)
                for w in weights
            ],
            winner_index=winner_index,
        )
        output = await self._extract(
            self.format_decision_summary(request),
            ExplanationOutput,
            system=EXPLANATION_SYSTEM_PROMPT,
        )
        if not output.explanation.strip():
            raise InterpretationError("No response from AI")
        return output.explanation.strip()

    @staticmethod
    def format_decision_summary(request: ExplainRequest) -> str:
        """Render the decision matrix as readable text for the LLM.

        Args:
            request: Validated explain request

        Returns:
            Summary with winner, options, weighted criteria and scores
        """
        weight_by_criterion = {w.criterion_index: w.weight for w in request.weights}
        score_by_pair = {
            (s.option_index, s.criterion_index): s.score for s in request.scores
        }

        lines = [f"Decision: {request.decision_title}", ""]
        lines.append(f"Winner: {request.options[request.winner_index]}")
        lines.append("")
        lines.append("Options evaluated:")
        lines.extend(f"{i}. {opt}" for i, opt in enumerate(request.options, 1))
        lines.append("")
        lines.append("Criteria used:")
        for i, criterion in enumerate(request.criteria):
            weight = weight_by_criterion.get(i, 1)
            lines.append(f"{i + 1}. {criterion} (weight: {weight})")
        lines.append("")
        lines.append("Scores:")
        for opt_idx, option in enumerate(request.options):
            lines.append("")
            lines.append(f"{option}:")
            for crit_idx, criterion in enumerate(request.criteria):
                score = score_by_pair.get((opt_idx, crit_idx), 0)
                lines.append(f"  - {criterion}: {score}/5")
        return "\n".join(lines)

    async def _extract(
        self, prompt: str, response_model: type[T], system: str | None = None
    ) -> T:
        try:
            return await self._llm.extract(prompt, response_model, system=system)
        except LLMClientError as e:
            logger.warning(
                "interpretation failed",
                output=response_model.__name__,
                error=str(e),
            )
            raise InterpretationError(str(e)) from e
