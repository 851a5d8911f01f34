"""Decision session core.

This module provides:
- ScoreLedger / WeightLedger: Upsert-only 1-5 rating ledgers
- compute_result: Weighted-sum aggregation with first-index tie break
- DecisionSession: Step state machine with completeness guards
- ManualEvaluation / ConversationalEvaluation: Ways to fill the score ledger
- ConversationalWeighing: Chat-driven criterion weighting
- DecisionWizard: Async controller wiring the session to interpretation
- SessionStore: In-memory registry of isolated sessions
"""

from src.decision.ledger import ScoreLedger, WeightLedger, clamp_rating
from src.decision.aggregation import (
    breakdown,
    compute_result,
    max_possible_total,
    weighted_total,
    winner_index,
)
from src.decision.errors import (
    InvalidInputError,
    InvalidStepError,
    RequestInFlightError,
    SessionError,
    SessionNotFoundError,
)
from src.decision.requests import RequestPurpose, RequestState, RequestTracker
from src.decision.session import DecisionSession
from src.decision.evaluation import (
    ConversationalEvaluation,
    EvaluationTurn,
    ManualEvaluation,
    TurnStatus,
)
from src.decision.weighing import ConversationalWeighing, WeighingTurn
from src.decision.wizard import DecisionWizard
from src.decision.store import SessionStore

__all__ = [
    "ConversationalEvaluation",
    "ConversationalWeighing",
    "DecisionSession",
    "DecisionWizard",
    "EvaluationTurn",
    "InvalidInputError",
    "InvalidStepError",
    "ManualEvaluation",
    "RequestInFlightError",
    "RequestPurpose",
    "RequestState",
    "RequestTracker",
    "ScoreLedger",
    "SessionError",
    "SessionNotFoundError",
    "SessionStore",
    "TurnStatus",
    "WeighingTurn",
    "WeightLedger",
    "breakdown",
    "clamp_rating",
    "compute_result",
    "max_possible_total",
    "weighted_total",
    "winner_index",
]
