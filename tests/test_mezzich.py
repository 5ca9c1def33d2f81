import math

import pytest

from mkappa import mezzich
from mkappa.agreement import compute_pairwise_rater_agreement
from mkappa.errors import (
    DegenerateExpectedAgreement,
    InvalidConfiguration,
    InvalidDegreesOfFreedom,
    MezzichKappaError,
    UndefinedSegmentAgreement,
    ZeroStandardError,
)
from mkappa.models import AgreementSummary, RaterData


def make_summary(po, pc):
    return AgreementSummary(
        segment_agreements=(),
        valid_pair_counts=(),
        coding_scheme_count=0,
        total_proportional_agreement=0.0,
        observed_agreement=po,
        expected_agreement=pc,
    )


class TestEstimateKappa:
    def test_formula(self):
        result = mezzich.estimate_kappa(make_summary(2 / 3, 1 / 3), 3)

        assert result.kappa == pytest.approx(0.5)
        assert result.std_error == pytest.approx(0.5 / math.sqrt(3))

    def test_negative_kappa(self):
        result = mezzich.estimate_kappa(make_summary(0.2, 0.4), 4)

        assert result.kappa == pytest.approx(-1 / 3)
        assert result.std_error < 0

    def test_perfect_observed_agreement_caps_at_one(self):
        result = mezzich.estimate_kappa(make_summary(1.0, 0.3), 10)

        assert result.kappa == pytest.approx(1.0)

    def test_expected_agreement_of_one(self):
        with pytest.raises(DegenerateExpectedAgreement):
            mezzich.estimate_kappa(make_summary(1.0, 1.0), 5)


class TestSignificance:
    @pytest.mark.parametrize("df, critical", [
        (1, 12.706),
        (2, 4.303),
        (5, 2.571),
        (10, 2.228),
        (30, 2.042),
    ])
    def test_interval_matches_t_table(self, df, critical):
        result = mezzich.test_significance(1.0, 1.0, df)

        assert result.ci_upper - 1.0 == pytest.approx(critical, abs=1e-3)
        assert 1.0 - result.ci_lower == pytest.approx(critical, abs=1e-3)

    def test_99_percent_interval(self):
        result = mezzich.test_significance(1.0, 1.0, 10, confidence_level=0.99)

        assert result.ci_upper - 1.0 == pytest.approx(3.169, abs=1e-3)
        assert result.confidence_level == 0.99

    def test_p_value_df1(self):
        # Closed form for one degree of freedom
        t = math.sqrt(2)
        result = mezzich.test_significance(t, 1.0, 1)

        assert result.p_value == pytest.approx(1 - 2 / math.pi * math.atan(t))

    def test_p_value_df2(self):
        result = mezzich.test_significance(math.sqrt(3), 1.0, 2)

        assert result.p_value == pytest.approx(1 - math.sqrt(3 / 5))

    def test_two_tailed(self):
        positive = mezzich.test_significance(0.3, 0.1, 8)
        negative = mezzich.test_significance(-0.3, 0.1, 8)

        assert positive.p_value == pytest.approx(negative.p_value)
        assert negative.t_statistic == pytest.approx(-3.0)

    def test_interval_uses_absolute_standard_error(self):
        result = mezzich.test_significance(-0.5, -0.2, 6)

        assert result.ci_lower < -0.5 < result.ci_upper
        assert result.confidence_interval == (result.ci_lower, result.ci_upper)

    def test_zero_degrees_of_freedom(self):
        with pytest.raises(InvalidDegreesOfFreedom) as exc_info:
            mezzich.test_significance(0.5, 0.1, 0)
        assert exc_info.value.degrees_of_freedom == 0

    def test_zero_standard_error(self):
        with pytest.raises(ZeroStandardError):
            mezzich.test_significance(0.0, 0.0, 4)

    def test_invalid_confidence_level(self):
        with pytest.raises(InvalidConfiguration):
            mezzich.test_significance(0.5, 0.1, 4, confidence_level=1.0)


class TestComputeMezzichKappa:
    def test_two_rater_example(self, two_raters):
        result = mezzich.compute_mezzich_kappa(two_raters)

        assert result.kappa.kappa == pytest.approx(0.5)
        assert result.kappa.std_error == pytest.approx(0.5 / math.sqrt(3))
        assert result.significance.t_statistic == pytest.approx(math.sqrt(3))
        assert result.significance.degrees_of_freedom == 2
        assert result.significance.p_value == pytest.approx(1 - math.sqrt(3 / 5))
        assert result.significance.ci_lower == pytest.approx(-0.742, abs=1e-3)
        assert result.significance.ci_upper == pytest.approx(1.742, abs=1e-3)

    def test_three_rater_example(self, three_raters):
        result = mezzich.compute_mezzich_kappa(three_raters)

        assert result.kappa.kappa == pytest.approx(0.56)
        assert result.kappa.std_error == pytest.approx(0.28)
        assert result.significance.t_statistic == pytest.approx(2.0)
        assert result.significance.degrees_of_freedom == 3
        assert result.significance.p_value == pytest.approx(0.139326, abs=1e-5)

    def test_perfect_agreement(self):
        data = RaterData.from_code_lists([[[0], [0]], [[0], [0]]])

        result = mezzich.compute_mezzich_kappa(data)

        assert result.kappa.kappa == pytest.approx(1.0)
        assert result.kappa.std_error == pytest.approx(1 / math.sqrt(2))
        assert result.significance.t_statistic == pytest.approx(math.sqrt(2))
        assert result.significance.degrees_of_freedom == 1

    def test_segment_details(self, two_raters):
        result = mezzich.compute_mezzich_kappa(two_raters)

        second = result.segments[1]
        assert second.rater_codes == (("c1", "c2"), ("c2",))
        assert second.agreement == 0.5
        assert second.valid_pairs == 1

        df = result.segments_to_dataframe()
        assert list(df.columns) == [
            "segment", "Rater 1", "Rater 2", "proportional_agreement", "valid_pairs",
        ]
        assert df["segment"].tolist() == [1, 2, 3]

    def test_to_dict(self, two_raters):
        values = mezzich.compute_mezzich_kappa(two_raters).to_dict()

        assert values["n_raters"] == 2
        assert values["coding_scheme_count"] == 6
        assert values["kappa"] == pytest.approx(0.5)

    def test_undefined_segment(self):
        data = RaterData.from_code_lists([
            [[0], [0, 1], []],
            [[0], [1], []],
        ])

        with pytest.raises(UndefinedSegmentAgreement):
            mezzich.compute_mezzich_kappa(data)

    def test_single_segment(self):
        data = RaterData.from_code_lists([[[0]], [[0]]])

        with pytest.raises(InvalidDegreesOfFreedom):
            mezzich.compute_mezzich_kappa(data)

    def test_zero_kappa(self):
        data = RaterData.from_code_lists([[[0], [0]], [[1], [1]]])

        with pytest.raises(ZeroStandardError):
            mezzich.compute_mezzich_kappa(data)

    def test_errors_share_a_base_class(self):
        with pytest.raises(MezzichKappaError):
            mezzich.compute_mezzich_kappa(RaterData.from_code_lists([[[]], [[]]]))

    def test_invalid_confidence_level(self, two_raters):
        with pytest.raises(InvalidConfiguration):
            mezzich.compute_mezzich_kappa(two_raters, confidence_level=1.5)

    def test_idempotent(self, three_raters):
        first = mezzich.compute_mezzich_kappa(three_raters)
        second = mezzich.compute_mezzich_kappa(three_raters)

        assert first == second

    def test_rater_order_does_not_change_kappa(self, three_raters):
        reordered = three_raters.with_raters([2, 0, 1])

        assert mezzich.compute_mezzich_kappa(reordered).kappa.kappa == pytest.approx(
            mezzich.compute_mezzich_kappa(three_raters).kappa.kappa
        )


class TestRaterImpact:
    def test_needs_three_raters(self, two_raters):
        assert mezzich.compute_rater_impact(two_raters, 0.5) == []

    def test_leave_one_out(self, three_raters):
        impact = mezzich.compute_rater_impact(three_raters, 0.56)

        assert [r.rater for r in impact][0] == "Cy"
        assert impact[0].kappa_without == pytest.approx(7 / 9)
        assert impact[0].delta == pytest.approx(7 / 9 - 0.56)

        # Without Ana or Ben, segment 4 has a single scorer
        failed = {r.rater: r for r in impact[1:]}
        assert set(failed) == {"Ana", "Ben"}
        for r in failed.values():
            assert r.delta is None
            assert "Segment 4" in r.error


@pytest.mark.parametrize("kappa, label, color", [
    (0.95, "Almost perfect", "green"),
    (0.7, "Substantial", "green"),
    (0.5, "Moderate", "orange"),
    (0.3, "Fair", "orange"),
    (0.1, "Slight", "red"),
    (0.0, "Slight", "red"),
    (-0.2, "Poor", "red"),
    (None, "Cannot compute", "gray"),
    (float("nan"), "Cannot compute", "gray"),
])
def test_interpret_kappa(kappa, label, color):
    assert mezzich.interpret_kappa(kappa) == (label, color)


def test_results_summary(three_raters):
    result = mezzich.compute_mezzich_kappa(three_raters)
    pairwise = compute_pairwise_rater_agreement(three_raters)
    impact = mezzich.compute_rater_impact(three_raters, result.kappa.kappa)

    text = mezzich.results_summary(result, pairwise, impact)

    assert text.startswith("MEZZICH'S KAPPA: 0.560 (Moderate)")
    assert "t(3) = 2.0000" in text
    assert "Ana vs Ben: 0.875 over 4 segments" in text
    assert "Cy: +0.218 (removal improves kappa)" in text
    assert "Ana: cannot compute" in text
    assert "Segment 1: 0.333" in text
