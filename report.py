"""CSV and PDF exports of a scored assessment."""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import (ListFlowable, ListItem, Paragraph,
                                SimpleDocTemplate, Spacer, Table, TableStyle)

from config import CONTENT_VERSION, DOMAINS, MAX_SCORE, QUESTIONS
from scoring import (answer_for, get_domain_narrative, get_tier_narrative,
                     score_answers)

REPORT_TITLE = "Compliance Risk Check"


def answers_frame(answers):
    """
    Build a dataframe with one row per question, in id order.

    Args:
        answers (dict): answer set keyed by question id

    Returns:
        pd.DataFrame: columns "id", "domain", "text", "answer"
    """
    titles = {d["id"]: d["title"] for d in DOMAINS}
    rows = [
        {
            "id": qid,
            "domain": titles.get(q["domain"], "Optional"),
            "text": q["text"],
            "answer": answer_for(answers, qid).value,
        }
        for qid, q in sorted(QUESTIONS.items())
    ]
    return pd.DataFrame(rows, columns=["id", "domain", "text", "answer"])


def _bullets(items, style):
    return ListFlowable(
        [ListItem(Paragraph(text, style)) for text in items],
        bulletType="bullet",
    )


def write_pdf_bytes(buf, answers):
    """
    Write a one-document PDF summary of the assessment to a bytes buffer.

    Sections: overall score and tier, tier narrative, domain scores table,
    and the recommended action for each domain.
    """
    result = score_answers(answers)
    tier = result["tier"]
    narrative = get_tier_narrative(tier)

    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=16, rightMargin=16, topMargin=16, bottomMargin=16
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(f"<b>{REPORT_TITLE}</b>", styles["Title"]),
        Spacer(1, 8),
        Paragraph(
            f"<b>Score:</b> {result['score']}/{MAX_SCORE}&nbsp;&nbsp;&nbsp; "
            f"<b>Score Tier:</b> {tier.value} Risk",
            styles["Heading3"],
        ),
        Paragraph(narrative["message"], styles["Normal"]),
        Spacer(1, 6),
        Paragraph(narrative["detail"], styles["Normal"]),
        Spacer(1, 10),
    ]

    tbl_data = [["Domain", "Score", "Level"]] + [
        [d["title"], f"{d['score']}/4", d["level"].value.capitalize()]
        for d in result["domains"]
    ]
    avail = A4[0] - 72
    col0 = 240
    col_rest = (avail - col0) / 2
    tbl = Table(tbl_data, colWidths=[col0, col_rest, col_rest], hAlign="LEFT")
    tbl.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e9ebf3")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#0b1020")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 1), (-1, -1), "CENTER"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("TOPPADDING", (0, 0), (-1, 0), 6),
            ]
        )
    )
    story += [
        Paragraph("<b>Domain Scores</b>", styles["Heading3"]),
        Spacer(1, 6),
        tbl,
        Spacer(1, 12),
    ]

    if narrative["impacts"]:
        story += [
            Paragraph("<b>What this means</b>", styles["Heading3"]),
            Spacer(1, 6),
            _bullets(narrative["impacts"], styles["Normal"]),
            Spacer(1, 12),
        ]

    actions = []
    for d in result["domains"]:
        text = get_domain_narrative(d["id"], d["score"])["action"]
        actions.append(f"[{d['title']}] {text}")
    story += [
        Paragraph("<b>Recommended Actions</b>", styles["Heading3"]),
        Spacer(1, 6),
        _bullets(actions, styles["Normal"]),
        Spacer(1, 12),
        Paragraph(f"Content version {CONTENT_VERSION}", styles["Italic"]),
    ]
    doc.build(story)
