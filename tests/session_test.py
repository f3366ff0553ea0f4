"""Questionnaire session: completion gate, view state and serialization."""

import pytest

from config import REQUIRED_QUESTION_IDS
from scoring import Answer, NotFoundError
from session import (QuestionnaireSession, SubmitResult, result_search,
                     view_from_search)


def test_required_answers_is_half_of_core_questions():
    assert QuestionnaireSession.required_answers() == 8


def test_submit_rejected_with_no_answers():
    session = QuestionnaireSession()
    outcome = session.try_submit()
    assert outcome.accepted is False
    assert "8" in outcome.reason
    assert session.submitted is False
    assert session.score is None


def test_submit_rejected_below_gate_even_with_optional_answer():
    session = QuestionnaireSession()
    for qid in REQUIRED_QUESTION_IDS[:7]:
        session.record_answer(qid, "yes")
    session.record_answer(17, "yes")
    assert session.try_submit().accepted is False
    assert session.submitted is False


@pytest.mark.parametrize("value", ["yes", "no"])
def test_submit_accepted_with_eight_answers_regardless_of_values(value):
    session = QuestionnaireSession()
    for qid in REQUIRED_QUESTION_IDS[8:]:
        session.record_answer(qid, value)
    outcome = session.try_submit()
    assert outcome == SubmitResult(True)
    assert session.submitted is True
    assert session.score == (8 if value == "yes" else 0)


def test_record_answer_validation():
    session = QuestionnaireSession()
    with pytest.raises(NotFoundError):
        session.record_answer(18, "yes")
    with pytest.raises(ValueError):
        session.record_answer(1, "sometimes")


def test_record_answer_none_clears():
    session = QuestionnaireSession()
    session.record_answer(1, True)
    session.record_answer(2, "no")
    session.record_answer(1, None)
    assert session.current_answers() == {2: Answer.NO}
    assert session.answered_count() == 1


def test_current_answers_is_a_copy():
    session = QuestionnaireSession()
    session.record_answer(1, "yes")
    session.current_answers()[2] = Answer.YES
    assert session.current_answers() == {1: Answer.YES}


def test_domain_selection_is_reversible_view_state():
    session = QuestionnaireSession()
    for qid in REQUIRED_QUESTION_IDS:
        session.record_answer(qid, "yes")
    session.try_submit()
    answers, score = session.current_answers(), session.score

    session.select_domain("documentation")
    assert session.selected_domain == "documentation"
    session.back_to_summary()
    assert session.selected_domain is None
    assert session.current_answers() == answers
    assert session.score == score == 16

    with pytest.raises(NotFoundError):
        session.select_domain("finance")


def test_apply_view_enters_and_leaves_results():
    session = QuestionnaireSession(answers={1: "yes", 2: "yes"})
    session.apply_view("result")
    assert session.submitted is True
    assert session.score == 2

    session.select_domain("documentation")
    session.apply_view(None)
    assert session.submitted is False
    assert session.score is None
    assert session.selected_domain is None
    assert session.answered_count() == 2


def test_reset_clears_everything():
    session = QuestionnaireSession(answers={1: "yes"}, submitted=True, score=1)
    session.reset()
    assert session.to_dict() == QuestionnaireSession().to_dict()


def test_round_trip_through_dict():
    session = QuestionnaireSession()
    session.record_answer(3, "yes")
    session.record_answer(10, "no")
    session.record_answer(17, "yes")
    session.apply_view("result")
    session.select_domain("operationalProcesses")

    data = session.to_dict()
    assert data["answers"] == {"3": "yes", "10": "no", "17": "yes"}
    restored = QuestionnaireSession.from_dict(data)
    assert restored.to_dict() == data
    assert restored.compute_overall_score() == 1


def test_from_dict_handles_empty_store():
    session = QuestionnaireSession.from_dict(None)
    assert session.current_answers() == {}
    assert session.submitted is False


@pytest.mark.parametrize(
    "search,view",
    [("?view=result", "result"), ("view=result&x=1", "result"), ("", None), (None, None), ("?x=1", None)],
)
def test_view_from_search(search, view):
    assert view_from_search(search) == view


def test_result_search_round_trips():
    assert view_from_search(result_search()) == "result"
