import pytest

from mkappa.agreement import aggregate_agreement
from mkappa.disagreement_analyzer import (
    code_frequency_table,
    compute_rater_disagreement_profile,
    disagreement_summary,
    filter_disagreements,
    find_disagreements,
)
from mkappa.models import RaterData


@pytest.fixture
def mixed():
    # Segment 1 disjoint, segment 2 full agreement, segment 3 missing one rater
    return RaterData.from_code_lists(
        [
            [[0], [1], [0]],
            [[1], [1], []],
            [[2], [1], [0, 1]],
        ],
        rater_names=["A", "B", "C"],
    )


def test_find_disagreements(mixed):
    found = find_disagreements(mixed)

    assert [d.segment for d in found] == [0, 2]
    assert found[0].disagreement_type == "disjoint"
    assert found[0].severity == 1.0
    assert found[1].disagreement_type == "missing"
    assert found[1].unscored_raters == ["B"]
    assert found[1].agreement == 0.5
    assert found[1].rater_codes["C"] == ("c1", "c2")


def test_find_disagreements_partial(three_raters):
    found = find_disagreements(three_raters, aggregate_agreement(three_raters))

    assert [d.segment for d in found] == [0, 1, 2]
    assert {d.disagreement_type for d in found} == {"partial"}


def test_find_disagreements_skips_undefined_segments():
    data = RaterData.from_code_lists([[[0], [0]], [[1], []]])

    found = find_disagreements(data)

    assert [d.segment for d in found] == [0]


def test_filter_disagreements(mixed):
    found = find_disagreements(mixed)

    assert len(filter_disagreements(found, disagreement_type="missing")) == 1
    assert [d.segment for d in filter_disagreements(found, rater="B")] == [0]
    assert [d.segment for d in filter_disagreements(found, min_severity=0.8)] == [0]
    assert filter_disagreements(found) == found


def test_disagreement_summary(mixed):
    summary = disagreement_summary(mixed).set_index(["rater_a", "rater_b"])

    row = summary.loc[("A", "B")]
    assert row["shared_segments"] == 2
    assert row["n_disagreements"] == 1
    assert row["pct_disagreements"] == 50
    assert row["n_disjoint"] == 1
    assert row["mean_agreement"] == pytest.approx(0.5)

    assert summary.loc[("A", "C")]["shared_segments"] == 3


def test_rater_disagreement_profile(three_raters):
    profile = compute_rater_disagreement_profile(three_raters).set_index("rater")

    assert profile.loc["Ana", "segments_scored"] == 4
    assert profile.loc["Cy", "segments_scored"] == 3
    assert profile["disagreements_involved"].tolist() == [3, 3, 3]
    assert profile["times_as_outlier"].tolist() == [0, 1, 2]


def test_tied_raters_are_not_outliers(mixed):
    profile = compute_rater_disagreement_profile(mixed).set_index("rater")

    assert profile["times_as_outlier"].sum() == 0
    assert profile.loc["B", "disagreements_involved"] == 1


def test_code_frequency_table(three_raters):
    table = code_frequency_table(three_raters)

    assert table.index.tolist() == ["c1", "c2", "c3"]
    assert table["Ana"].tolist() == [2, 2, 1]
    assert table["Cy"].tolist() == [1, 3, 1]


def test_code_frequency_table_uses_labels():
    data = RaterData.from_code_lists([[[0]], [[0]]], code_labels=["Praise", "Question"])

    table = code_frequency_table(data)

    assert table.index.tolist() == ["Praise", "Question"]
    assert table.loc["Question"].tolist() == [0, 0]
