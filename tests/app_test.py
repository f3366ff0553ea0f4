"""Dash callbacks, called directly: routing, answer capture, submission and drill-down."""

import json
from contextvars import copy_context

import dash
import pytest
from dash._callback_context import context_value
from dash._utils import AttributeDict

from app import (apply_results_nav, build_results_summary, display_page,
                 download_csv, download_pdf, navigate_results, on_submit,
                 record_answers)
from config import REQUIRED_QUESTION_IDS
from scoring import NotFoundError
from session import QuestionnaireSession


def _walk(component):
    if isinstance(component, (list, tuple)):
        for item in component:
            yield from _walk(item)
        return
    yield component
    children = getattr(component, "children", None)
    if children is None:
        return
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        yield from _walk(child)


def _texts(component):
    return [c for c in _walk(component) if isinstance(c, str)]


def _ids(component):
    return [getattr(c, "id", None) for c in _walk(component) if getattr(c, "id", None)]


def _session_with(n_yes, n_no=0):
    session = QuestionnaireSession()
    for qid in REQUIRED_QUESTION_IDS[:n_yes]:
        session.record_answer(qid, "yes")
    for qid in REQUIRED_QUESTION_IDS[n_yes:n_yes + n_no]:
        session.record_answer(qid, "no")
    return session.to_dict()


def test_home_page_resets_session():
    page, header, data = display_page("/", "", _session_with(10))
    assert "Check your compliance risk in 3 minutes." in _texts(page)
    assert "Exit" not in _texts(header)
    assert data == QuestionnaireSession().to_dict()


def test_test_page_renders_questionnaire_with_answers_kept():
    page, header, data = display_page("/test", "", _session_with(3))
    ids = _ids(page)
    assert "submit-assessment" in ids
    assert {"type": "q-input", "qid": 17} in ids
    assert "Exit" in _texts(header)
    assert data["answers"] == {"1": "yes", "2": "yes", "3": "yes"}
    assert data["submitted"] is False


def test_result_flag_renders_results():
    page, _, data = display_page("/test", "?view=result", _session_with(12, 4))
    texts = _texts(page)
    assert "Low Risk" in texts
    assert any("12/16" in t for t in texts)
    assert data["submitted"] is True
    assert data["score"] == 12


def test_unknown_path_renders_not_found():
    page, _, _ = display_page("/nope", "", None)
    assert "Page not found" in _texts(page)


def test_record_answers_copies_inputs():
    ids = [{"type": "q-input", "qid": q} for q in (1, 2, 3, 17)]
    data = record_answers(["yes", None, "no", "yes"], ids, None)
    assert data["answers"] == {"1": "yes", "3": "no", "17": "yes"}


def test_submit_rejected_shows_toast_only():
    session_data, search, toast = on_submit(1, QuestionnaireSession().to_dict())
    assert session_data is dash.no_update
    assert search is dash.no_update
    assert "8" in toast.children


def test_submit_accepted_switches_to_results():
    session_data, search, toast = on_submit(1, _session_with(2, 6))
    assert search == "?view=result"
    assert toast is None
    assert session_data["submitted"] is True
    assert session_data["score"] == 2


def test_submit_without_click_does_nothing():
    with pytest.raises(dash.exceptions.PreventUpdate):
        on_submit(None, QuestionnaireSession().to_dict())


def test_results_drill_down_and_back():
    _, _, data = display_page("/test", "?view=result", _session_with(16))
    body, data = apply_results_nav("regulatoryTracking", data)
    assert data["selected_domain"] == "regulatoryTracking"
    assert "Regulatory Tracking" in _texts(body)
    assert data["score"] == 16

    body, data = apply_results_nav("summary", data)
    assert data["selected_domain"] is None
    assert "Low Risk" in _texts(body)

    with pytest.raises(NotFoundError):
        apply_results_nav("finance", data)


def test_download_csv_payload():
    payload = download_csv(1, _session_with(4))
    assert payload["filename"] == "compliance_risk_answers.csv"
    assert "id,domain,text,answer" in payload["content"]


def test_download_pdf_payload():
    payload = download_pdf(1, _session_with(12))
    assert payload["filename"] == "Compliance_Risk_Check.pdf"
    assert payload["base64"] is True
    assert payload["content"]


def _run_nav(target, n_clicks, data):
    prop_id = json.dumps({"target": target, "type": "results-nav"}, separators=(",", ":"))

    def run():
        context_value.set(
            AttributeDict(triggered_inputs=[{"prop_id": f"{prop_id}.n_clicks", "value": n_clicks}])
        )
        return navigate_results([n_clicks], data)

    return copy_context().run(run)


def test_navigate_results_ignores_buttons_mounting():
    _, _, data = display_page("/test", "?view=result", _session_with(16))
    with pytest.raises(dash.exceptions.PreventUpdate):
        _run_nav("summary", None, data)


def test_navigate_results_opens_clicked_domain():
    _, _, data = display_page("/test", "?view=result", _session_with(16))
    body, data = _run_nav("documentation", 1, data)
    assert data["selected_domain"] == "documentation"
    assert "Documentation" in _texts(body)


def test_summary_score_always_matches_tier():
    answers = {qid: "yes" for qid in REQUIRED_QUESTION_IDS[:6]}
    texts = _texts(build_results_summary(answers))
    assert "High Risk" in texts
    assert any("6/16" in t for t in texts)
