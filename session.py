"""Questionnaire session: answer state, completion gate and results view state."""

import logging
import math
from typing import NamedTuple, Optional
from urllib.parse import parse_qs, urlencode

from config import DOMAIN_IDS, MIN_COMPLETION_RATIO, QUESTIONS, REQUIRED_QUESTION_IDS
from scoring import Answer, NotFoundError, answer_for, compute_overall_score, to_answer

log = logging.getLogger(__name__)

VIEW_PARAM = "view"
RESULT_VIEW = "result"


def view_from_search(search):
    """Return the `view` query parameter from a URL search string, or None."""
    values = parse_qs((search or "").lstrip("?")).get(VIEW_PARAM)
    return values[0] if values else None


def result_search():
    return "?" + urlencode({VIEW_PARAM: RESULT_VIEW})


class SubmitResult(NamedTuple):
    accepted: bool
    reason: Optional[str] = None


class QuestionnaireSession:
    """
    Mutable state behind one run of the questionnaire.

    Holds the answer set plus the view state the results page needs
    (submitted flag, stored score, selected drill-down domain). The whole
    session round-trips through `to_dict`/`from_dict` so it can live in a
    browser-memory store.
    """

    def __init__(self, answers=None, submitted=False, score=None, selected_domain=None):
        self._answers = {}
        for qid, value in (answers or {}).items():
            self.record_answer(int(qid), value)
        self.submitted = submitted
        self.score = score
        self.selected_domain = selected_domain

    # -------- Answers --------
    def record_answer(self, question_id, value):
        """
        Record a yes/no answer; None or "unanswered" clears it.

        :raises NotFoundError: if the question id is not part of the questionnaire
        :raises ValueError: if the value is not a recognized answer
        """
        if question_id not in QUESTIONS:
            raise NotFoundError(f"Unknown question: {question_id!r}")
        answer = to_answer(value)
        if answer is Answer.UNANSWERED:
            self._answers.pop(question_id, None)
        else:
            self._answers[question_id] = answer

    def current_answers(self):
        return dict(self._answers)

    def answered_count(self):
        """Number of scored questions with a yes or no answer."""
        return sum(
            1 for qid in REQUIRED_QUESTION_IDS
            if answer_for(self._answers, qid) is not Answer.UNANSWERED
        )

    @staticmethod
    def required_answers():
        return math.ceil(MIN_COMPLETION_RATIO * len(REQUIRED_QUESTION_IDS))

    # -------- Submission --------
    def try_submit(self):
        """
        Apply the completion gate and, if it passes, score and enter results mode.

        Returns:
            SubmitResult: accepted flag and, when rejected, a user-facing reason.
        """
        answered, required = self.answered_count(), self.required_answers()
        if answered < required:
            log.info("Submission rejected: %d of %d required answers", answered, required)
            return SubmitResult(
                False,
                f"Please answer at least {required} of the {len(REQUIRED_QUESTION_IDS)} "
                f"core questions before submitting (answered: {answered}).",
            )
        self.score = self.compute_overall_score()
        self.submitted = True
        self.selected_domain = None
        log.info("Submission accepted: %d answers, score %d", answered, self.score)
        return SubmitResult(True)

    def compute_overall_score(self):
        return compute_overall_score(self._answers)

    # -------- View state --------
    def apply_view(self, view):
        """Sync results mode with the URL `view` flag."""
        if view == RESULT_VIEW:
            self.submitted = True
            self.score = self.compute_overall_score()
        else:
            self.submitted = False
            self.score = None
            self.selected_domain = None

    def select_domain(self, domain_id):
        if domain_id not in DOMAIN_IDS:
            raise NotFoundError(f"Unknown domain: {domain_id!r}")
        self.selected_domain = domain_id

    def back_to_summary(self):
        self.selected_domain = None

    def reset(self):
        self._answers.clear()
        self.submitted = False
        self.score = None
        self.selected_domain = None

    # -------- Serialization --------
    def to_dict(self):
        return {
            "answers": {str(qid): a.value for qid, a in sorted(self._answers.items())},
            "submitted": self.submitted,
            "score": self.score,
            "selected_domain": self.selected_domain,
        }

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            answers=data.get("answers"),
            submitted=bool(data.get("submitted")),
            score=data.get("score"),
            selected_domain=data.get("selected_domain"),
        )
