from datetime import datetime

import pytest

from mkappa.errors import DataLoadError, UndefinedSegmentAgreement
from mkappa.mezzich import compute_mezzich_kappa
from mkappa.report import (
    format_confidence_level,
    generate_basic_report,
    render_failure,
    report_csv,
    report_filename,
    segment_table,
    summary_rows,
    write_report,
)


@pytest.fixture
def result(two_raters):
    return compute_mezzich_kappa(two_raters)


def test_format_confidence_level():
    assert format_confidence_level(0.95) == "95%"
    assert format_confidence_level(0.975) == "97.5%"


def test_summary_rows(result):
    rows = dict(summary_rows(result, ["a.csv", "b.csv"]))

    assert rows["Input files"] == "a.csv; b.csv"
    assert rows["Segments analyzed"] == "3"
    assert rows["Unique coding schemes"] == "6"
    assert rows["df"] == "2"
    assert rows["t"] == "1.7321"
    assert rows["p"].startswith("0.22540")
    assert rows["95% Confidence Interval"] == "-0.742 - 1.742"


def test_summary_rows_without_inputs(result):
    labels = [label for label, _ in summary_rows(result)]

    assert "Input files" not in labels
    assert labels[0] == "Segments analyzed"


def test_segment_table(result):
    table = segment_table(result)

    assert list(table.columns) == [
        "Segment", "Rater 1 Codes", "Rater 2 Codes", "Proportional Agreement",
    ]
    assert table.loc[1, "Rater 1 Codes"] == "c1, c2"
    assert table.loc[2, "Rater 2 Codes"] == "c2, c3"
    assert table["Proportional Agreement"].tolist() == [1.0, 0.5, 0.5]


def test_report_csv_layout(result):
    lines = report_csv(result, ["a.csv", "b.csv"]).split("\n")

    assert lines[0] == "Input files,a.csv; b.csv"
    assert "" in lines
    blank = lines.index("")
    assert lines[blank + 1].startswith("Mezzich's Kappa,")
    assert "Segment,Rater 1 Codes,Rater 2 Codes,Proportional Agreement" in lines


def test_report_filename():
    stamp = datetime(2024, 1, 2, 3, 4, 5)

    assert report_filename(3, stamp) == "mkappa_r3_20240102_030405.csv"


def test_write_report(result, tmp_path):
    stamp = datetime(2024, 1, 2, 3, 4, 5)

    path = write_report(result, output_dir=tmp_path / "out", timestamp=stamp)

    assert path == tmp_path / "out" / "mkappa_r2_20240102_030405.csv"
    assert "95% Confidence Interval,-0.742 - 1.742" in path.read_text()


def test_write_report_explicit_path(result, tmp_path):
    target = tmp_path / "report.csv"

    assert write_report(result, output_path=target) == target
    assert target.exists()


def test_generate_basic_report(result):
    text = generate_basic_report(result, {"Study Name": "Pilot"})

    assert text.startswith("# Inter-Rater Reliability Report")
    assert "## Pilot" in text
    assert "**Mezzich's Kappa: 0.500** (Moderate)" in text
    assert "| 2 | 0.500 | 1 |" in text


def test_render_failure_adds_hint():
    text = render_failure(UndefinedSegmentAgreement(2))

    assert text.startswith("Segment 3 has no pair of raters")
    assert "Remove the segment" in text


def test_render_failure_data_load():
    assert "one CSV/XLSX per rater" in render_failure(DataLoadError("bad file"))
