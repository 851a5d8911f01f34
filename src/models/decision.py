"""Decision models: the question, its options and criteria, and ratings."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from src.models.base import BaseEntity

MIN_RATING = 1
MAX_RATING = 5


class Step(str, Enum):
    """Wizard step, in forward order."""

    INPUT = "input"
    OPTIONS = "options"
    CRITERIA = "criteria"
    EVALUATION = "evaluation"
    WEIGHING = "weighing"
    RESULTS = "results"

    @property
    def position(self) -> int:
        """Zero-based position of this step in the wizard."""
        return list(Step).index(self)

    @property
    def next(self) -> "Step | None":
        """Following step, or None for the last one."""
        steps = list(Step)
        idx = self.position
        return steps[idx + 1] if idx + 1 < len(steps) else None

    @property
    def previous(self) -> "Step | None":
        """Preceding step, or None for the first one."""
        return list(Step)[self.position - 1] if self.position > 0 else None


class EvaluationMode(str, Enum):
    """How the score ledger gets populated."""

    MANUAL = "manual"
    CONVERSATIONAL = "conversational"


class SuggestionKind(str, Enum):
    """What a suggestion request is for."""

    OPTIONS = "options"
    CRITERIA = "criteria"


class Decision(BaseEntity):
    """A decision being made.

    Options and criteria are ordered; scores and weights refer to
    them by position, so removing an entry shifts later indices.
    Duplicate entries are allowed.
    """

    title: str = Field(default="", description="What is being decided")
    options: list[str] = Field(
        default_factory=list,
        description="Alternatives being decided among, in insertion order",
    )
    criteria: list[str] = Field(
        default_factory=list,
        description="Dimensions every option is rated against",
    )


class Score(BaseModel):
    """Rating of one option against one criterion."""

    option_index: int = Field(ge=0)
    criterion_index: int = Field(ge=0)
    value: int = Field(ge=MIN_RATING, le=MAX_RATING)


class Weight(BaseModel):
    """Importance rating of one criterion."""

    criterion_index: int = Field(ge=0)
    value: int = Field(ge=MIN_RATING, le=MAX_RATING)


class ResultCell(BaseModel):
    """One (option, criterion) cell of the results table."""

    score: int = Field(description="Score, 0 when missing")
    weight: int = Field(description="Criterion weight, 1 when missing")
    weighted: int = Field(description="score x weight")


class DecisionResult(BaseModel):
    """Aggregated outcome. Derived on demand, never stored."""

    weighted_totals: list[int] = Field(description="Weighted total per option")
    max_possible_total: int = Field(description="criteria x max score x max weight")
    winner_index: int = Field(description="First option with the highest total")


class ChatMessage(BaseModel):
    """One line of a conversational transcript."""

    role: Literal["user", "assistant"]
    content: str
