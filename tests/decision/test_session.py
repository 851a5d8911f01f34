"""Tests for the DecisionSession state machine."""

import pytest

from src.decision.errors import InvalidInputError, InvalidStepError
from src.decision.requests import RequestPurpose, RequestState
from src.decision.session import DecisionSession
from src.models.decision import EvaluationMode, Step


class TestInputStep:
    """Tests for the input step."""

    def test_starts_empty_in_input(self):
        session = DecisionSession()
        assert session.step == Step.INPUT
        assert session.title == ""
        assert session.options == []
        assert session.criteria == []
        assert session.mode == EvaluationMode.MANUAL

    def test_blank_title_blocks_advance(self):
        """Guard failure keeps the step and is not an error."""
        session = DecisionSession()
        session.set_title("   ")
        assert session.advance() is False
        assert session.step == Step.INPUT

    def test_title_is_trimmed_and_advances(self):
        session = DecisionSession()
        session.set_title("  Where to eat?  ")
        assert session.advance() is True
        assert session.title == "Where to eat?"
        assert session.step == Step.OPTIONS

    def test_back_from_input_does_nothing(self):
        session = DecisionSession()
        assert session.back() is False
        assert session.step == Step.INPUT


class TestOptionsAndCriteria:
    """Tests for editing options and criteria."""

    def test_needs_two_options(self, make_session):
        session = make_session(["Pizza"], [], step=Step.OPTIONS)
        assert session.advance() is False
        session.add_option("Sushi")
        assert session.advance() is True
        assert session.step == Step.CRITERIA

    def test_needs_one_criterion(self, make_session):
        session = make_session(["Pizza", "Sushi"], [], step=Step.CRITERIA)
        assert session.advance() is False
        session.add_criterion("Taste")
        assert session.advance() is True
        assert session.step == Step.EVALUATION

    def test_add_returns_position_and_trims(self, make_session):
        session = make_session([], [], step=Step.OPTIONS)
        assert session.add_option(" Pizza ") == 0
        assert session.add_option("Sushi") == 1
        assert session.options == ["Pizza", "Sushi"]

    def test_duplicates_are_kept(self, make_session):
        session = make_session(["Pizza", "Pizza"], [], step=Step.OPTIONS)
        assert session.options == ["Pizza", "Pizza"]
        assert session.can_advance()

    def test_blank_option_rejected(self, make_session):
        session = make_session([], [], step=Step.OPTIONS)
        with pytest.raises(InvalidInputError):
            session.add_option("  ")

    def test_remove_shifts_later_positions(self, make_session):
        session = make_session(["A", "B", "C"], [], step=Step.OPTIONS)
        assert session.remove_option(1) == "B"
        assert session.options == ["A", "C"]

    def test_remove_out_of_range_rejected(self, make_session):
        session = make_session(["A"], [], step=Step.OPTIONS)
        with pytest.raises(InvalidInputError):
            session.remove_option(3)

    def test_options_only_editable_in_options_step(self, make_session):
        session = make_session(["A", "B"], [], step=Step.CRITERIA)
        with pytest.raises(InvalidStepError):
            session.add_option("C")
        with pytest.raises(InvalidStepError):
            session.remove_option(0)

    def test_criteria_only_editable_in_criteria_step(self, make_session):
        session = make_session(["A", "B"], [], step=Step.OPTIONS)
        with pytest.raises(InvalidStepError):
            session.add_criterion("Taste")

    def test_title_only_editable_in_input_step(self, make_session):
        session = make_session(["A", "B"], [], step=Step.OPTIONS)
        with pytest.raises(InvalidStepError):
            session.set_title("Other")

    def test_removal_does_not_touch_ledgers(self, evaluation_session):
        """Removing an option leaves existing scores in place."""
        session = evaluation_session
        session.set_score(1, 1, 4)
        session.back()
        session.back()
        session.remove_option(0)
        assert session.scores.get(1, 1) == 4
        assert session.scores.count() == 1


class TestEvaluationAndWeighing:
    """Tests for ledger gating in the evaluation and weighing steps."""

    def test_scores_rejected_before_evaluation(self, make_session):
        session = make_session(["A", "B"], ["X"], step=Step.CRITERIA)
        with pytest.raises(InvalidStepError):
            session.set_score(0, 0, 3)

    def test_score_indices_checked(self, evaluation_session):
        with pytest.raises(InvalidInputError):
            evaluation_session.set_score(2, 0, 3)
        with pytest.raises(InvalidInputError):
            evaluation_session.set_score(0, -1, 3)
        with pytest.raises(InvalidInputError):
            evaluation_session.set_weight(2, 3)

    def test_evaluation_guard_requires_every_pair(self, evaluation_session):
        session = evaluation_session
        session.set_score(0, 0, 5)
        session.set_score(1, 1, 5)
        session.set_score(0, 1, 2)
        assert session.advance() is False
        session.set_score(1, 0, 4)
        assert session.advance() is True
        assert session.step == Step.WEIGHING

    def test_weighing_guard_requires_every_criterion(self, evaluation_session):
        session = evaluation_session
        for o in range(2):
            for c in range(2):
                session.set_score(o, c, 3)
        session.advance()
        session.set_weight(0, 3)
        assert session.advance() is False
        session.set_weight(1, 1)
        assert session.advance() is True
        assert session.step == Step.RESULTS

    def test_results_is_terminal(self, evaluation_session):
        session = evaluation_session
        for o in range(2):
            for c in range(2):
                session.set_score(o, c, 3)
        session.advance()
        session.set_weight(0, 3)
        session.set_weight(1, 3)
        session.advance()
        assert session.advance() is False
        assert session.step == Step.RESULTS

    def test_set_score_returns_clamped(self, evaluation_session):
        assert evaluation_session.set_score(0, 0, 42) == 5


class TestBackAndReset:
    """Tests for backward transitions, mode switching and reset."""

    def test_back_keeps_data(self, evaluation_session):
        session = evaluation_session
        session.set_score(0, 0, 5)
        assert session.back() is True
        assert session.step == Step.CRITERIA
        assert session.criteria == ["Taste", "Price"]
        assert session.scores.get(0, 0) == 5

    def test_back_cancels_step_requests(self, evaluation_session):
        """Leaving evaluation drops its outstanding request."""
        session = evaluation_session
        ticket = session.requests.issue(RequestPurpose.EVALUATION, (session.epoch, 0))
        session.back()
        assert session.requests.resolve(ticket, None) is False
        assert ticket.state == RequestState.DISCARDED

    def test_transitions_bump_epoch(self, evaluation_session):
        epoch = evaluation_session.epoch
        evaluation_session.back()
        assert evaluation_session.epoch > epoch

    def test_mode_switch_keeps_scores(self, evaluation_session):
        session = evaluation_session
        session.set_score(0, 1, 2)
        ticket = session.requests.issue(RequestPurpose.EVALUATION, (session.epoch, 1))
        session.set_mode(EvaluationMode.CONVERSATIONAL)
        assert session.mode == EvaluationMode.CONVERSATIONAL
        assert session.scores.get(0, 1) == 2
        assert session.requests.resolve(ticket, None) is False

    def test_switching_to_same_mode_is_noop(self, evaluation_session):
        epoch = evaluation_session.epoch
        evaluation_session.set_mode(EvaluationMode.MANUAL)
        assert evaluation_session.epoch == epoch

    def test_reset_clears_everything(self, evaluation_session):
        session = evaluation_session
        session_id = session.id
        session.set_score(0, 0, 5)
        session.set_mode(EvaluationMode.CONVERSATIONAL)
        session.reset()
        assert session.id == session_id
        assert session.step == Step.INPUT
        assert session.title == ""
        assert session.options == []
        assert session.criteria == []
        assert session.scores.count() == 0
        assert session.weights.count() == 0
        assert session.mode == EvaluationMode.MANUAL

    def test_leaving_results_clears_explanation(self, evaluation_session):
        session = evaluation_session
        for o in range(2):
            for c in range(2):
                session.set_score(o, c, 3)
        session.advance()
        session.set_weight(0, 3)
        session.set_weight(1, 3)
        session.advance()
        session.explanation = "Because."
        session.back()
        assert session.explanation is None
        assert session.step == Step.WEIGHING


class TestResultPreview:
    """Tests for result() on partial and complete ledgers."""

    def test_partial_preview(self, evaluation_session):
        evaluation_session.set_score(1, 0, 4)
        result = evaluation_session.result()
        assert result.weighted_totals == [0, 4]
        assert result.winner_index == 1
        assert result.max_possible_total == 50


class TestIdentity:
    """Tests for the session id and decision timestamps."""

    def test_session_id_is_decision_id(self):
        session = DecisionSession()
        assert session.id == session.decision.id

    def test_reset_keeps_id_and_restarts_decision(self, evaluation_session):
        session = evaluation_session
        session_id = session.id
        started = session.decision.created_at
        session.reset()
        assert session.id == session_id
        assert session.decision.id == session_id
        assert session.decision.created_at >= started

    def test_edits_touch_decision(self, make_session):
        session = make_session([], [], step=Step.OPTIONS)
        before = session.decision.updated_at
        session.add_option("Pizza")
        assert session.decision.updated_at >= before

    def test_cells_match_result(self, evaluation_session):
        evaluation_session.set_score(0, 0, 5)
        evaluation_session.set_score(0, 1, 2)
        cells = evaluation_session.cells()
        totals = [sum(c.weighted for c in row) for row in cells]
        assert totals == evaluation_session.result().weighted_totals
