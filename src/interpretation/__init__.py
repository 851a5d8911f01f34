"""Interpretation of free-form decision input.

This module provides:
- InterpretationCollaborator: Backend-neutral contract used by the core
- LLMInterpreter: Implementation on top of an LLM client
- Wire schemas for the evaluate, weight, suggest and explain operations
"""

from src.interpretation.base import (
    InterpretationCollaborator,
    InterpretationError,
    InterpretationRequestError,
)
from src.interpretation.llm_interpreter import LLMInterpreter
from src.interpretation.schemas import (
    CriterionWeight,
    EvaluateRequest,
    EvaluateResponse,
    ExplainRequest,
    ExplainResponse,
    SuggestRequest,
    SuggestResponse,
    WeightRequest,
    WeightResponse,
)

__all__ = [
    "CriterionWeight",
    "EvaluateRequest",
    "EvaluateResponse",
    "ExplainRequest",
    "ExplainResponse",
    "InterpretationCollaborator",
    "InterpretationError",
    "InterpretationRequestError",
    "LLMInterpreter",
    "SuggestRequest",
    "SuggestResponse",
    "WeightRequest",
    "WeightResponse",
]
