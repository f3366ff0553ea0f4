# app.py

import logging

import dash
import plotly.graph_objects as go
from dash import ALL, Input, Output, State, ctx, dcc, html

from config import (CTA_URL, DEBUG, DOMAINS, HOST, MAX_SCORE,
                    OPTIONAL_QUESTION_IDS, PORT, QUESTIONS)
from report import answers_frame, write_pdf_bytes
from scoring import (Answer, RiskTier, answer_for, get_domain_detail,
                     get_domain_narrative, get_tier_narrative, score_answers,
                     summarize_feedback)
from session import QuestionnaireSession, result_search, view_from_search

app = dash.Dash(__name__, suppress_callback_exceptions=True)
app.title = "Compliance Risk Score Tool"
server = app.server

BRAND = "Theraptly"
TEST_PATH = "/test"

YES_NO = [
    {"label": "Yes", "value": "yes"},
    {"label": "No", "value": "no"},
]

TIER_STYLE = {
    RiskTier.HIGH: {"label": "High Risk", "class": "tier-high", "icon": "!", "color": "#dc2626"},
    RiskTier.MODERATE: {"label": "Moderate Risk", "class": "tier-moderate", "icon": "!", "color": "#ea580c"},
    RiskTier.LOW: {"label": "Low Risk", "class": "tier-low", "icon": "✓", "color": "#16a34a"},
}

POLICY_NOTE = "Analyze a policy to see how these strengths reflect in your documentation."

# for chart sizes
BAR_H = 320


def _base_fig_layout(fig, height=320):
    """
    Apply a consistent layout to a figure.

    :param fig: a figure to update
    :param height: the height of the figure in pixels
    :return: the updated figure
    """
    font_color = "#0b1020"
    grid_color = "#CBD5E1"
    fig.update_layout(
        autosize=False,
        height=height,
        margin=dict(l=30, r=30, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=font_color),
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            linecolor=font_color,
            fixedrange=True,
        ),
        yaxis=dict(
            showgrid=True,
            gridcolor=grid_color,
            zeroline=False,
            linecolor=font_color,
            ticks="outside",
            fixedrange=True,
        ),
        uirevision="keep",
    )
    return fig


def bar_figure(domain_results):
    """
    Return a bar figure of the four domain scores (0-4).

    Args:
        domain_results (list): per-domain dicts with "title" and "score"

    Returns:
        go.Figure: bar figure
    """
    titles = [d["title"] for d in domain_results]
    fig = go.Figure(go.Bar(x=titles, y=[d["score"] for d in domain_results]))
    fig.update_layout(
        xaxis=dict(categoryorder="array", categoryarray=titles),
        yaxis=dict(range=[0, 4], tick0=0, dtick=1),
    )
    return _base_fig_layout(fig, height=BAR_H)


# -------------- Layout --------------------
def build_header(pathname):
    """Brand header; the quiz pages add a subtitle and an Exit link."""
    left = [html.Span(BRAND, className="brand")]
    right = []
    if pathname == TEST_PATH:
        left.append(html.Span("Compliance Risk Score Tool", className="subtitle"))
        right.append(dcc.Link("Exit", href="/", className="exit-link"))
    return [html.Div(left, className="header-left"), html.Div(right, className="header-right")]


def build_home():
    return html.Div(
        [
            html.H1("Check your compliance risk in 3 minutes."),
            html.P(
                "Answer a few quick questions and get an instant breakdown of your "
                "strengths, weaknesses, and next steps.",
                className="lead",
            ),
            dcc.Link(html.Button("Start test", className="btn-primary"), href=TEST_PATH),
        ],
        className="home",
    )


def _question_row(qid, answers):
    q = QUESTIONS[qid]
    value = answer_for(answers, qid)
    return html.Div(
        [
            html.Div(f"{qid}. {q['text']}", className="qtext"),
            dcc.RadioItems(
                id={"type": "q-input", "qid": qid},
                options=YES_NO,
                value=None if value is Answer.UNANSWERED else value.value,
                className="yes-no",
                inline=True,
            ),
        ],
        className="qrow",
    )


def build_question_cards(answers):
    """
    Build one card per domain, plus the optional section, with a Yes/No
    input per question pre-filled from the current answers.

    :param answers: the session's answer set
    :return: a list of HTML Div elements
    """
    cards = []
    for n, domain in enumerate(DOMAINS, start=1):
        children = [html.H3(f"DOMAIN {n}: {domain['title'].upper()}", className="domain-title")]
        children += [_question_row(qid, answers) for qid in domain["question_ids"]]
        cards.append(html.Div(children, className=f"domain-card d-{domain['id']}"))
    if OPTIONAL_QUESTION_IDS:
        children = [html.H3("OPTIONAL", className="domain-title")]
        children += [_question_row(qid, answers) for qid in OPTIONAL_QUESTION_IDS]
        cards.append(html.Div(children, className="domain-card d-optional"))
    return cards


def build_questionnaire(answers):
    return html.Div(
        [
            html.Div(
                html.H2("Core Questions (yes/no)"),
                className="intro-banner",
            ),
            html.Div(id="toast", className="toast"),
            html.Div(build_question_cards(answers), className="questions"),
            html.Div(
                html.Button("Submit", id="submit-assessment", className="btn-primary"),
                className="submit-row",
            ),
        ],
        className="questionnaire",
    )


def _text_list(items, class_name):
    return html.Ul([html.Li(t) for t in items], className=class_name)


def build_results_summary(answers):
    """
    Build the results summary: tier, narrative, headline strengths and
    weaknesses, domain chart and one card per domain.

    Args:
        answers (dict): the session's answer set

    Returns:
        html.Div: the summary view
    """
    result = score_answers(answers)
    score = result["score"]
    tier = result["tier"]
    style = TIER_STYLE[tier]
    narrative = get_tier_narrative(tier)
    summary = summarize_feedback(answers)

    domain_cards = []
    for d in result["domains"]:
        domain_cards.append(
            html.Div(
                [
                    html.Div(d["title"], className="kpi-title"),
                    html.Div(f"{d['score']}/4 • {d['level'].value.capitalize()}", className="kpi-value"),
                    html.P(get_domain_narrative(d["id"], d["score"])["impact"], className="muted"),
                    html.Button(
                        "View details",
                        id={"type": "results-nav", "target": d["id"]},
                        className="btn-link",
                    ),
                ],
                className=f"kpi level-{d['level'].value}",
            )
        )

    return html.Div(
        [
            html.Div(
                [
                    html.Div("Score Tier:", className="kpi-title"),
                    html.Div(
                        [html.Span(style["icon"], className="tier-icon"), style["label"]],
                        className="tier-label",
                        style={"color": style["color"]},
                    ),
                ],
                className="score-card",
            ),
            html.Div(
                [
                    html.H2(f"{narrative['message']} Your score is {score}/{MAX_SCORE}."),
                    html.P(narrative["detail"], className="muted"),
                    html.Div(
                        [
                            html.H3("Strengths"),
                            _text_list(summary["strengths"], "strengths"),
                            html.P(POLICY_NOTE, className="note"),
                        ],
                        className="box box-strengths",
                    ),
                    html.Div(
                        [
                            html.H3("Weaknesses"),
                            _text_list(summary["weaknesses"], "weaknesses"),
                            html.P(POLICY_NOTE, className="note"),
                        ],
                        className="box box-weaknesses",
                    ),
                    html.Div(
                        [
                            html.H3("What this means"),
                            _text_list(narrative["strengths"], "tier-strengths"),
                            _text_list(narrative["weaknesses"], "tier-weaknesses"),
                            _text_list(narrative["impacts"], "impacts"),
                        ],
                        className="box box-impacts",
                    ),
                    html.A(
                        "Analyze your Policy",
                        href=CTA_URL,
                        target="_blank",
                        rel="noopener noreferrer",
                        className="btn-primary cta",
                    ),
                ],
                className="summary-content",
            ),
            html.H3("Domain Scores"),
            dcc.Graph(
                id="domain-bar",
                figure=bar_figure(result["domains"]),
                style={"height": f"{BAR_H}px"},
                config={"responsive": False, "displaylogo": False, "scrollZoom": False},
            ),
            html.Div(domain_cards, className="kpis"),
        ],
        className=f"results-summary {style['class']}",
    )


def build_domain_detail(domain_id, answers):
    """Drill-down for one domain: strengths, weaknesses, impact and action."""
    title = next(d["title"] for d in DOMAINS if d["id"] == domain_id)
    result = next(d for d in score_answers(answers)["domains"] if d["id"] == domain_id)
    detail = get_domain_detail(domain_id, answers)
    narrative = get_domain_narrative(domain_id, result["score"])
    return html.Div(
        [
            html.Button(
                "Back to summary",
                id={"type": "results-nav", "target": "summary"},
                className="btn-link",
            ),
            html.H2(title),
            html.Div(
                f"{result['score']}/4 • {result['level'].value.capitalize()}",
                className="kpi-value",
            ),
            html.Div(
                [html.H3("Strengths"), _text_list(detail["strengths"] or ["None yet."], "strengths")],
                className="box box-strengths",
            ),
            html.Div(
                [html.H3("Weaknesses"), _text_list(detail["weaknesses"] or ["None."], "weaknesses")],
                className="box box-weaknesses",
            ),
            html.Div([html.H3("Impact"), html.P(narrative["impact"])], className="box"),
            html.Div([html.H3("Recommended action"), html.P(narrative["action"])], className="box"),
        ],
        className=f"domain-detail d-{domain_id}",
    )


def build_results_body(session):
    answers = session.current_answers()
    if session.selected_domain:
        return build_domain_detail(session.selected_domain, answers)
    return build_results_summary(answers)


def build_results(session):
    return html.Div(
        [
            html.Div(build_results_body(session), id="results-body"),
            html.Div(
                [
                    html.Button("Download CSV", id="dl-csv", className="btn"),
                    html.Button("Download PDF", id="dl-pdf", className="btn"),
                ],
                className="exports",
            ),
        ],
        className="results",
    )


def build_not_found(pathname):
    return html.Div(
        [html.H2("Page not found"), html.P(pathname), dcc.Link("Back to start", href="/")],
        className="not-found",
    )


app.layout = html.Div(
    id="page-root",
    className="page",
    children=[
        dcc.Location(id="url", refresh=False),
        # memory storage: a full reload starts a fresh session
        dcc.Store(id="session-store", storage_type="memory", data=QuestionnaireSession().to_dict()),
        html.Header(id="header", className="header"),
        html.Main(id="page-content", className="content"),
        dcc.Download(id="dl-csv-out"),
        dcc.Download(id="dl-pdf-out"),
    ],
)


# -------- Callbacks ------------------
@app.callback(
    Output("page-content", "children"),
    Output("header", "children"),
    Output("session-store", "data", allow_duplicate=True),
    Input("url", "pathname"),
    Input("url", "search"),
    State("session-store", "data"),
    prevent_initial_call="initial_duplicate",
)
def display_page(pathname, search, data):
    """
    Route the URL to a page and keep the session's view state in step with it.

    Args:
        pathname (str): current URL path
        search (str): current URL query string; "?view=result" selects results
        data (dict): serialized session, as stored in the "session-store"

    Returns:
        tuple: page children, header children, updated session data.
    """
    session = QuestionnaireSession.from_dict(data)
    if pathname in (None, "", "/"):
        session.reset()
        page = build_home()
    elif pathname == TEST_PATH:
        session.apply_view(view_from_search(search))
        if session.submitted:
            page = build_results(session)
        else:
            page = build_questionnaire(session.current_answers())
    else:
        page = build_not_found(pathname)
    return page, build_header(pathname), session.to_dict()


@app.callback(
    Output("session-store", "data", allow_duplicate=True),
    Input({"type": "q-input", "qid": ALL}, "value"),
    State({"type": "q-input", "qid": ALL}, "id"),
    State("session-store", "data"),
    prevent_initial_call=True,
)
def record_answers(values, ids, data):
    """
    Copy the questionnaire inputs into the session's answer set.

    Args:
        values (list): the Yes/No values, one per rendered question
        ids (list): the matching pattern-matching ids ({"type", "qid"})
        data (dict): serialized session

    Returns:
        dict: updated session data.
    """
    if not ids:
        raise dash.exceptions.PreventUpdate
    session = QuestionnaireSession.from_dict(data)
    for rid, value in zip(ids, values):
        session.record_answer(rid["qid"], value)
    return session.to_dict()


@app.callback(
    Output("session-store", "data", allow_duplicate=True),
    Output("url", "search"),
    Output("toast", "children"),
    Input("submit-assessment", "n_clicks"),
    State("session-store", "data"),
    prevent_initial_call=True,
)
def on_submit(n_clicks, data):
    """
    Apply the completion gate; on success switch the URL to the results view.

    Returns:
        tuple: session data, URL search, toast content. A rejected submission
            only updates the toast.
    """
    if not n_clicks:
        raise dash.exceptions.PreventUpdate
    session = QuestionnaireSession.from_dict(data)
    outcome = session.try_submit()
    if not outcome.accepted:
        return dash.no_update, dash.no_update, html.Div(outcome.reason, className="toast-error")
    return session.to_dict(), result_search(), None


def apply_results_nav(target, data):
    """
    Move between the results summary and a domain drill-down.

    Args:
        target (str): a domain id, or "summary" to go back
        data (dict): serialized session

    Returns:
        tuple: results body children, updated session data.
    """
    session = QuestionnaireSession.from_dict(data)
    if target == "summary":
        session.back_to_summary()
    else:
        session.select_domain(target)
    return build_results_body(session), session.to_dict()


@app.callback(
    Output("results-body", "children"),
    Output("session-store", "data", allow_duplicate=True),
    Input({"type": "results-nav", "target": ALL}, "n_clicks"),
    State("session-store", "data"),
    prevent_initial_call=True,
)
def navigate_results(_, data):
    # buttons appearing in the layout also trigger this, with n_clicks None
    if not ctx.triggered_id or not ctx.triggered[0]["value"]:
        raise dash.exceptions.PreventUpdate
    return apply_results_nav(ctx.triggered_id["target"], data)


# Exports
@app.callback(
    Output("dl-csv-out", "data"),
    Input("dl-csv", "n_clicks"),
    State("session-store", "data"),
    prevent_initial_call=True,
)
def download_csv(_, data):
    """
    Download the answers as a CSV file.

    Args:
        _ (int): Click count of the "Download CSV" button.
        data (dict): serialized session

    Returns:
        dict: dcc.Download payload with the CSV data.
    """
    if not data:
        raise dash.exceptions.PreventUpdate
    df = answers_frame(QuestionnaireSession.from_dict(data).current_answers())
    return dcc.send_data_frame(df.to_csv, "compliance_risk_answers.csv", index=False)


@app.callback(
    Output("dl-pdf-out", "data"),
    Input("dl-pdf", "n_clicks"),
    State("session-store", "data"),
    prevent_initial_call=True,
)
def download_pdf(_, data):
    """
    Download a PDF summary of the results.

    Returns:
        dict: dcc.Download payload with the PDF data.
    """
    if not data:
        raise dash.exceptions.PreventUpdate
    answers = QuestionnaireSession.from_dict(data).current_answers()
    return dcc.send_bytes(
        lambda b: write_pdf_bytes(b, answers), "Compliance_Risk_Check.pdf"
    )


# ---------- Main -------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host=HOST, port=PORT, debug=DEBUG)
