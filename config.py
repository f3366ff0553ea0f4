# --- Configuration --------------------------------------------------------------------------------

import json
import logging
import os
from importlib import resources
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)


class ContentError(RuntimeError):
    """Raised when the assessment content asset is missing or malformed."""


DEFAULT_CONTENT_PATH = Path(str(resources.files("assessment_content").joinpath("assessment.json")))
CONTENT_PATH = Path(os.getenv("ASSESSMENT_CONTENT_PATH", DEFAULT_CONTENT_PATH))

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8050"))
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

# At least half of the core questions must be answered before scoring.
MIN_COMPLETION_RATIO = 0.5

CTA_URL = "https://calendly.com/tobi-walker-theraptly/30min"

DOMAIN_COUNT = 4
QUESTIONS_PER_DOMAIN = 4
NARRATIVE_SCORES = range(QUESTIONS_PER_DOMAIN + 1)
TIERS = ("High", "Moderate", "Low")


def load_content(path=CONTENT_PATH):
    """
    Read the assessment content asset from disk.

    :param path: path to the JSON content file
    :return: the parsed content dict
    :raises ContentError: if the file is missing or is not valid JSON
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise ContentError(f"Assessment content not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ContentError(f"Assessment content is not valid JSON: {path} ({exc})") from exc


def validate_content(content):
    """
    Check the sanity of an assessment content dict.

    Returns a list of human-readable problems; an empty list means the
    content can be scored.
    """
    problems = []
    for key in ("version", "domains", "questions", "feedback", "domain_narratives", "tier_narratives"):
        if key not in content:
            problems.append(f"missing top-level key {key!r}")
    if problems:
        return problems

    domains = content["domains"]
    questions = {q["id"]: q for q in content["questions"]}
    if len(domains) != DOMAIN_COUNT:
        problems.append(f"expected {DOMAIN_COUNT} domains, found {len(domains)}")

    scored = []
    for d in domains:
        qids = d.get("question_ids", [])
        if len(qids) != QUESTIONS_PER_DOMAIN:
            problems.append(f"domain {d['id']!r} has {len(qids)} questions")
        for qid in qids:
            q = questions.get(qid)
            if q is None:
                problems.append(f"domain {d['id']!r} lists unknown question {qid}")
            elif q.get("domain") != d["id"]:
                problems.append(f"question {qid} is not tagged with domain {d['id']!r}")
        scored.extend(qids)

        narratives = content["domain_narratives"].get(d["id"], [])
        if len(narratives) != len(NARRATIVE_SCORES):
            problems.append(f"domain {d['id']!r} needs {len(NARRATIVE_SCORES)} narratives")
        elif any(not (n.get("impact") and n.get("action")) for n in narratives):
            problems.append(f"domain {d['id']!r} has an incomplete narrative entry")

    if len(set(scored)) != len(scored):
        problems.append("a question belongs to more than one domain")

    for qid in questions:
        entry = content["feedback"].get(str(qid))
        if not entry or not entry.get("strength") or not entry.get("weakness"):
            problems.append(f"question {qid} has no feedback entry")

    for tier in TIERS:
        bundle = content["tier_narratives"].get(tier)
        if bundle is None:
            problems.append(f"missing tier narrative {tier!r}")
            continue
        for field in ("message", "detail", "strengths", "weaknesses", "impacts"):
            if field not in bundle:
                problems.append(f"tier {tier!r} narrative is missing {field!r}")
    return problems


def _validate_config(content):
    problems = validate_content(content)
    if problems:
        for p in problems:
            log.warning("[content] %s", p)
        raise ContentError(f"Assessment content failed validation ({len(problems)} problems)")


CONTENT = load_content()
_validate_config(CONTENT)

CONTENT_VERSION = CONTENT["version"]

# Ordered as they appear in the questionnaire.
DOMAINS = [
    {"id": d["id"], "title": d["title"], "question_ids": list(d["question_ids"])}
    for d in CONTENT["domains"]
]
DOMAIN_IDS = [d["id"] for d in DOMAINS]

QUESTIONS = {q["id"]: q for q in CONTENT["questions"]}
REQUIRED_QUESTION_IDS = sorted(qid for d in DOMAINS for qid in d["question_ids"])
OPTIONAL_QUESTION_IDS = sorted(qid for qid in QUESTIONS if qid not in REQUIRED_QUESTION_IDS)
MAX_SCORE = len(REQUIRED_QUESTION_IDS)

FEEDBACK = {int(k): v for k, v in CONTENT["feedback"].items()}
DOMAIN_NARRATIVES = CONTENT["domain_narratives"]
TIER_NARRATIVES = CONTENT["tier_narratives"]
