"""Schemas for the interpretation collaborator.

Two groups of models live here:
- Wire models for the four operations (evaluate, weight, suggest,
  explain). Field names on the wire are camelCase; every field listed
  without a default is required.
- LLM output models describing what the language model is asked to
  return. They are deliberately lenient (optional fields) because
  defaulting and clamping happen after extraction.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.decision import SuggestionKind


class WireModel(BaseModel):
    """Base for camelCase wire models that also accept field names."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


# Evaluate


class EvaluateRequest(WireModel):
    """Free-text rating of one option against one criterion."""

    user_message: str = Field(alias="userMessage", min_length=1)
    option: str = Field(min_length=1)
    criterion: str = Field(min_length=1)


class EvaluateResponse(WireModel):
    """Interpreted score (already clamped to 1-5) with reasoning."""

    score: int
    reasoning: str


# Weight


class WeightRequest(WireModel):
    """Free-text statement of which criteria matter most."""

    user_message: str = Field(alias="userMessage", min_length=1)
    criteria: list[str] = Field(min_length=1)


class CriterionWeight(WireModel):
    """Interpreted weight for one criterion."""

    criterion_index: int = Field(alias="criterionIndex")
    weight: int
    reasoning: str = ""


class WeightResponse(WireModel):
    """Interpreted weights plus an overall summary."""

    weights: list[CriterionWeight] = Field(default_factory=list)
    summary: str = ""


# Suggest


class SuggestRequest(WireModel):
    """Request for options or criteria worth considering."""

    decision_title: str = Field(alias="decisionTitle", min_length=1)
    type: SuggestionKind


class SuggestResponse(WireModel):
    """Advisory suggestions; may be empty."""

    suggestions: list[str] = Field(default_factory=list)


# Explain


class ScoreEntry(WireModel):
    """Score as sent to the explain operation."""

    option_index: int = Field(alias="optionIndex", ge=0)
    criterion_index: int = Field(alias="criterionIndex", ge=0)
    score: int


class WeightEntry(WireModel):
    """Weight as sent to the explain operation."""

    criterion_index: int = Field(alias="criterionIndex", ge=0)
    weight: int


class ExplainRequest(WireModel):
    """Full decision snapshot plus the computed winner."""

    decision_title: str = Field(alias="decisionTitle", min_length=1)
    options: list[str]
    criteria: list[str]
    scores: list[ScoreEntry]
    weights: list[WeightEntry]
    winner_index: int = Field(alias="winnerIndex")

    @model_validator(mode="after")
    def _winner_in_range(self) -> "ExplainRequest":
        if not 0 <= self.winner_index < len(self.options):
            raise ValueError("winnerIndex must reference one of the options")
        return self


class ExplainResponse(WireModel):
    """Narrative explanation of the result."""

    explanation: str


# LLM output


class EvaluationOutput(BaseModel):
    """Model output for a single evaluation."""

    score: int | None = Field(default=None, description="Score from 1 to 5")
    reasoning: str | None = Field(
        default=None, description="1-2 sentence explanation of the score"
    )


class WeightItemOutput(BaseModel):
    """Model output for one criterion weight."""

    criterion_index: int = Field(description="Zero-based index of the criterion")
    weight: int | None = Field(default=None, description="Importance from 1 to 5")
    reasoning: str | None = Field(default=None, description="Brief explanation")


class WeightingOutput(BaseModel):
    """Model output for a weighting request."""

    weights: list[WeightItemOutput] = Field(default_factory=list)
    summary: str | None = Field(
        default=None, description="Brief overall explanation of the weighting"
    )


class SuggestionsOutput(BaseModel):
    """Model output for suggestions.

    Accepts a bare JSON array, or an object carrying the list under
    ``suggestions``, ``options``, ``criteria`` or any other key.
    """

    suggestions: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _find_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"suggestions": data}
        if isinstance(data, dict) and not isinstance(data.get("suggestions"), list):
            for key in ("options", "criteria"):
                if isinstance(data.get(key), list):
                    return {"suggestions": data[key]}
            first = next((v for v in data.values() if isinstance(v, list)), None)
            return {"suggestions": first or []}
        return data


class ExplanationOutput(BaseModel):
    """Model output for an explanation."""

    explanation: str = Field(description="2-3 paragraph explanation of the result")
