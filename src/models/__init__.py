"""Canonical data models for Decision Helper.

This module exports all domain models used throughout the application:
- BaseEntity: Base class with id, timestamps
- Decision: Title plus ordered options and criteria
- Score / Weight: 1-5 ratings keyed by position
- DecisionResult, ResultCell: Weighted totals, winner and per-cell breakdown
- Step, EvaluationMode, SuggestionKind: Wizard enums
- ChatMessage: Conversational transcript line
"""

from src.models.base import BaseEntity
from src.models.decision import (
    MAX_RATING,
    MIN_RATING,
    ChatMessage,
    Decision,
    DecisionResult,
    EvaluationMode,
    ResultCell,
    Score,
    Step,
    SuggestionKind,
    Weight,
)

__all__ = [
    # Base
    "BaseEntity",
    # Decision
    "Decision",
    "DecisionResult",
    "ResultCell",
    "Score",
    "Weight",
    "MIN_RATING",
    "MAX_RATING",
    # Wizard
    "Step",
    "EvaluationMode",
    "SuggestionKind",
    "ChatMessage",
]
