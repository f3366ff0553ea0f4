"""Deterministic scoring for the compliance risk check. Pure functions, no I/O."""

import copy
from enum import Enum

from config import (DOMAIN_NARRATIVES, DOMAINS, FEEDBACK, MAX_SCORE,
                    OPTIONAL_QUESTION_IDS, REQUIRED_QUESTION_IDS,
                    TIER_NARRATIVES)


class NotFoundError(LookupError):
    """Raised when a question id, domain id or narrative score has no entry."""


class Answer(str, Enum):
    YES = "yes"
    NO = "no"
    UNANSWERED = "unanswered"


class RiskTier(str, Enum):
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"


class DomainLevel(str, Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


# Lower bounds, checked best tier first.
RISK_TIER_THRESHOLDS = [(12, RiskTier.LOW), (7, RiskTier.MODERATE), (0, RiskTier.HIGH)]
DOMAIN_LEVEL_THRESHOLDS = [(4, DomainLevel.STRONG), (3, DomainLevel.MODERATE), (0, DomainLevel.WEAK)]
DOMAIN_MAX_SCORE = 4

NO_STRENGTHS = "No specific strengths identified based on answers."
NO_WEAKNESSES = "No specific weaknesses identified based on answers."

_DOMAINS_BY_ID = {d["id"]: d for d in DOMAINS}


# ----------- Helpers -------------
def to_answer(value):
    """
    Normalize a raw answer value to an `Answer`.

    Accepts `Answer` members, "yes"/"no"/"unanswered", True/False and None.

    :raises ValueError: for anything else
    """
    if value is None:
        return Answer.UNANSWERED
    if value is True:
        return Answer.YES
    if value is False:
        return Answer.NO
    try:
        return Answer(value)
    except ValueError:
        raise ValueError(f"Unrecognized answer value: {value!r}") from None


def answer_for(answers, question_id):
    """Look up an answer by int id, falling back to its str form (JSON keys)."""
    if question_id in answers:
        return to_answer(answers[question_id])
    return to_answer(answers.get(str(question_id)))


def _is_yes(answers, question_id):
    return answer_for(answers, question_id) is Answer.YES


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _domain(domain_id):
    try:
        return _DOMAINS_BY_ID[domain_id]
    except (KeyError, TypeError):
        raise NotFoundError(f"Unknown domain: {domain_id!r}") from None


# -------------- Scores & levels ---------------
def compute_overall_score(answers):
    """
    Count `yes` answers across the scored questions.

    The optional question and unknown ids never contribute; a missing
    answer counts the same as `no`.
    """
    return sum(1 for qid in REQUIRED_QUESTION_IDS if _is_yes(answers, qid))


def classify_risk_tier(score):
    """
    Map an overall score (0-16) to a risk tier.

    0-6 -> High, 7-11 -> Moderate, 12-16 -> Low.
    """
    if not 0 <= score <= MAX_SCORE:
        raise ValueError(f"Overall score out of range [0, {MAX_SCORE}]: {score}")
    for lower, tier in RISK_TIER_THRESHOLDS:
        if score >= lower:
            return tier


def compute_domain_score(domain_id, answers):
    """Count `yes` answers among one domain's four questions."""
    return sum(1 for qid in _domain(domain_id)["question_ids"] if _is_yes(answers, qid))


def classify_domain_level(domain_score):
    """Map a domain score (0-4) to weak (0-2), moderate (3) or strong (4)."""
    if not 0 <= domain_score <= DOMAIN_MAX_SCORE:
        raise ValueError(f"Domain score out of range [0, {DOMAIN_MAX_SCORE}]: {domain_score}")
    for lower, level in DOMAIN_LEVEL_THRESHOLDS:
        if domain_score >= lower:
            return level


def score_answers(answers):
    """
    Score a full answer set.

    Returns:
        dict: {"score", "tier", "domains": [{"id", "title", "score", "level"}, ...]}
            with domains in questionnaire order.
    """
    domains = []
    for d in DOMAINS:
        d_score = compute_domain_score(d["id"], answers)
        domains.append(
            {
                "id": d["id"],
                "title": d["title"],
                "score": d_score,
                "level": classify_domain_level(d_score),
            }
        )
    score = compute_overall_score(answers)
    return {"score": score, "tier": classify_risk_tier(score), "domains": domains}


# -------------- Narrative lookups ---------------
def get_question_feedback(question_id, answer):
    """Strength text for a `yes` answer, weakness text for anything else."""
    entry = FEEDBACK.get(question_id) if _is_int(question_id) else None
    if entry is None:
        raise NotFoundError(f"No feedback registered for question {question_id!r}")
    return entry["strength"] if to_answer(answer) is Answer.YES else entry["weakness"]


def get_domain_detail(domain_id, answers):
    """
    Split a domain's feedback into strengths and weaknesses.

    Questions are visited in ascending id order, whatever order the
    answers were recorded in.
    """
    strengths, weaknesses = [], []
    for qid in sorted(_domain(domain_id)["question_ids"]):
        text = get_question_feedback(qid, answer_for(answers, qid))
        (strengths if _is_yes(answers, qid) else weaknesses).append(text)
    return {"strengths": strengths, "weaknesses": weaknesses}


def get_domain_narrative(domain_id, domain_score):
    """Impact and action text for a domain at a given score."""
    _domain(domain_id)
    narratives = DOMAIN_NARRATIVES.get(domain_id)
    if narratives is None:
        raise NotFoundError(f"No narratives registered for domain {domain_id!r}")
    if not _is_int(domain_score) or not 0 <= domain_score < len(narratives):
        raise NotFoundError(f"No narrative for domain {domain_id!r} at score {domain_score!r}")
    entry = narratives[domain_score]
    return {"impact": entry["impact"], "action": entry["action"]}


def get_tier_narrative(tier):
    """Canonical message/detail/strengths/weaknesses/impacts bundle for a tier."""
    try:
        bundle = TIER_NARRATIVES[RiskTier(tier).value]
    except (ValueError, KeyError):
        raise NotFoundError(f"No narrative for risk tier {tier!r}") from None
    return copy.deepcopy(
        {k: bundle[k] for k in ("message", "detail", "strengths", "weaknesses", "impacts")}
    )


def summarize_feedback(answers, limit=3):
    """
    Headline strengths and weaknesses for the results summary.

    Scored questions are always included; the optional question only once
    it has been answered. Each list is cut to `limit` items and falls back
    to a placeholder line when empty.
    """
    strengths, weaknesses = [], []
    qids = REQUIRED_QUESTION_IDS + [
        qid for qid in OPTIONAL_QUESTION_IDS
        if answer_for(answers, qid) is not Answer.UNANSWERED
    ]
    for qid in sorted(qids):
        text = get_question_feedback(qid, answer_for(answers, qid))
        (strengths if _is_yes(answers, qid) else weaknesses).append(text)
    return {
        "strengths": strengths[:limit] or [NO_STRENGTHS],
        "weaknesses": weaknesses[:limit] or [NO_WEAKNESSES],
    }
