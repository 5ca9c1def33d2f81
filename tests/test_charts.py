import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest

from mkappa.agreement import compute_pairwise_rater_agreement
from mkappa.mezzich import compute_mezzich_kappa, compute_rater_impact
from mkappa.models import PairwiseResult
from visualization.charts import (
    color_by_kappa,
    plot_code_frequency,
    plot_kappa_interval,
    plot_pairwise_heatmap,
    plot_rater_impact,
    plot_segment_agreement,
    truncate_label,
)


@pytest.fixture
def result(three_raters):
    return compute_mezzich_kappa(three_raters)


def test_truncate_label():
    assert truncate_label("short") == "short"
    assert truncate_label("a" * 30, max_length=10) == "aaaaaaa..."


def test_plot_segment_agreement(result):
    fig = plot_segment_agreement(result)

    assert isinstance(fig, go.Figure)
    assert list(fig.data[0].x) == [1, 2, 3, 4]
    assert len(fig.layout.shapes) == 2


def test_plot_pairwise_heatmap(three_raters):
    fig = plot_pairwise_heatmap(compute_pairwise_rater_agreement(three_raters))

    z = np.asarray(fig.data[0].z, dtype=float)
    assert z.shape == (3, 3)
    np.testing.assert_allclose(np.diag(z), 1.0)
    np.testing.assert_allclose(z, z.T)
    assert z[0, 1] == pytest.approx(0.875)


def test_plot_pairwise_heatmap_without_shared_segments():
    pairwise = [PairwiseResult("A", "B", None, 0)]

    fig = plot_pairwise_heatmap(pairwise)

    texts = [a.text for a in fig.layout.annotations]
    assert "n/a" in texts


def test_plot_code_frequency():
    frequency = pd.DataFrame([[2, 1], [0, 3]], index=["Praise", "Question"], columns=["A", "B"])

    fig = plot_code_frequency(frequency)

    assert isinstance(fig, go.Figure)
    assert list(fig.data[0].y) == ["Praise", "Question"]


def test_plot_rater_impact_skips_failed_raters(three_raters, result):
    impact = compute_rater_impact(three_raters, result.kappa.kappa)

    fig = plot_rater_impact(impact)

    assert list(fig.data[0].x) == ["Cy"]


def test_plot_rater_impact_empty():
    fig = plot_rater_impact([])

    assert len(fig.data) == 0


def test_plot_kappa_interval(result):
    fig = plot_kappa_interval(result)

    trace = fig.data[0]
    assert trace.x[0] == pytest.approx(0.56)
    assert trace.error_x.array[0] == pytest.approx(result.significance.ci_upper - 0.56)


@pytest.mark.parametrize("value, color", [
    (0.9, "#90EE90"),
    (0.4, "#FFE4B5"),
    (0.1, "#FFB6C1"),
    (np.nan, "#f0f0f0"),
])
def test_color_by_kappa(value, color):
    assert color_by_kappa(value).endswith(color)
