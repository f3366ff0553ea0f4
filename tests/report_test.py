"""Exports: answers CSV frame and PDF summary."""

import io

from report import answers_frame, write_pdf_bytes


def test_answers_frame_has_one_row_per_question():
    df = answers_frame({1: "yes", "2": False, 17: True})
    assert list(df.columns) == ["id", "domain", "text", "answer"]
    assert list(df["id"]) == list(range(1, 18))
    assert df.loc[0, "answer"] == "yes"
    assert df.loc[1, "answer"] == "no"
    assert df.loc[2, "answer"] == "unanswered"
    assert df.loc[0, "domain"] == "Documentation"
    assert df.loc[16, "domain"] == "Optional"


def test_pdf_report_is_written():
    buf = io.BytesIO()
    write_pdf_bytes(buf, {qid: "yes" for qid in range(1, 13)})
    data = buf.getvalue()
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_pdf_report_with_no_answers():
    buf = io.BytesIO()
    write_pdf_bytes(buf, {})
    assert buf.getvalue().startswith(b"%PDF")
