"""Weighted-sum aggregation over a decision snapshot.

Pure functions: nothing here mutates the ledgers. Missing scores
count as 0 and missing weights as 1, so a partially filled matrix
still produces a preview.
"""

from src.decision.ledger import ScoreLedger, WeightLedger
from src.models.decision import MAX_RATING, DecisionResult, ResultCell

MISSING_SCORE = 0
MISSING_WEIGHT = 1


def result_cell(
    option_index: int,
    criterion_index: int,
    scores: ScoreLedger,
    weights: WeightLedger,
) -> ResultCell:
    """Score, weight and their product for one pair."""
    score = scores.get(option_index, criterion_index)
    weight = weights.get(criterion_index)
    score = MISSING_SCORE if score is None else score
    weight = MISSING_WEIGHT if weight is None else weight
    return ResultCell(score=score, weight=weight, weighted=score * weight)


def weighted_total(
    option_index: int,
    criterion_count: int,
    scores: ScoreLedger,
    weights: WeightLedger,
) -> int:
    """Sum of score x weight across all criteria for one option."""
    return sum(
        result_cell(option_index, criterion_index, scores, weights).weighted
        for criterion_index in range(criterion_count)
    )


def breakdown(
    option_count: int,
    criterion_count: int,
    scores: ScoreLedger,
    weights: WeightLedger,
) -> list[list[ResultCell]]:
    """Per-cell table, one row per option and one column per criterion."""
    return [
        [
            result_cell(option_index, criterion_index, scores, weights)
            for criterion_index in range(criterion_count)
        ]
        for option_index in range(option_count)
    ]


def max_possible_total(criterion_count: int) -> int:
    """Best achievable total: every score and weight at the maximum."""
    return criterion_count * MAX_RATING * MAX_RATING


def winner_index(totals: list[int]) -> int:
    """Index of the highest total; the earliest index wins ties.

    Returns 0 for an empty list.
    """
    best_total = -1
    best_index = 0
    for index, total in enumerate(totals):
        if total > best_total:
            best_total = total
            best_index = index
    return best_index


def compute_result(
    option_count: int,
    criterion_count: int,
    scores: ScoreLedger,
    weights: WeightLedger,
) -> DecisionResult:
    """Aggregate the ledgers into totals and a winner.

    Args:
        option_count: Number of options in the decision
        criterion_count: Number of criteria in the decision
        scores: Score ledger (may be partial)
        weights: Weight ledger (may be partial)

    Returns:
        DecisionResult with per-option totals, max total and winner
    """
    totals = [
        weighted_total(option_index, criterion_count, scores, weights)
        for option_index in range(option_count)
    ]
    return DecisionResult(
        weighted_totals=totals,
        max_possible_total=max_possible_total(criterion_count),
        winner_index=winner_index(totals),
    )
