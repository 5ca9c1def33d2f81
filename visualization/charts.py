"""Plotly visualization functions for reliability analysis."""

from typing import List

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.figure_factory as ff
import plotly.graph_objects as go

from mkappa.models import MezzichResult, PairwiseResult, RaterImpact


def truncate_label(label: str, max_length: int = 20) -> str:
    """Truncate a label if it exceeds max_length."""
    if len(label) > max_length:
        return label[:max_length - 3] + "..."
    return label


def plot_segment_agreement(
    result: MezzichResult,
    title: str = "Proportional Agreement by Segment",
) -> go.Figure:
    """Create bar chart of segment agreement with Po and Pc reference lines.

    Args:
        result: MezzichResult from compute_mezzich_kappa
        title: Chart title

    Returns:
        Plotly Figure
    """
    df = pd.DataFrame([{
        "segment": s.segment + 1,
        "agreement": s.agreement,
        "valid_pairs": s.valid_pairs,
    } for s in result.segments])

    fig = px.bar(
        df,
        x="segment",
        y="agreement",
        color="agreement",
        color_continuous_scale="RdYlGn",
        range_color=[0, 1],
        title=title,
        labels={"segment": "Segment", "agreement": "Proportional Agreement", "valid_pairs": "Valid Pairs"},
        hover_data={"valid_pairs": True},
    )

    fig.add_hline(
        y=result.summary.observed_agreement,
        line_dash="solid",
        line_color="green",
        annotation_text=f"Po ({result.summary.observed_agreement:.2f})",
        annotation_position="top left",
    )
    fig.add_hline(
        y=result.summary.expected_agreement,
        line_dash="dash",
        line_color="orange",
        annotation_text=f"Pc ({result.summary.expected_agreement:.2f})",
        annotation_position="bottom left",
    )

    fig.update_layout(
        yaxis_range=[0, 1.05],
        height=400,
    )

    return fig


def plot_pairwise_heatmap(
    pairwise: List[PairwiseResult],
    title: str = "Pairwise Rater Agreement",
) -> go.Figure:
    """Create symmetric heatmap of mean pairwise agreement.

    Args:
        pairwise: List of PairwiseResult objects
        title: Chart title

    Returns:
        Plotly Figure
    """
    raters = []
    for p in pairwise:
        for name in (p.rater_a, p.rater_b):
            if name not in raters:
                raters.append(name)
    n = len(raters)

    matrix = np.eye(n)  # Diagonal = 1.0

    for p in pairwise:
        i = raters.index(p.rater_a)
        j = raters.index(p.rater_b)
        value = p.mean_agreement if p.mean_agreement is not None else np.nan
        matrix[i, j] = matrix[j, i] = value

    annotations = np.where(np.isnan(matrix), "n/a", np.round(matrix, 2).astype(str))

    fig = ff.create_annotated_heatmap(
        z=np.nan_to_num(matrix),
        x=raters,
        y=raters,
        colorscale="RdYlGn",
        zmin=0,
        zmax=1,
        showscale=True,
        annotation_text=annotations,
    )

    fig.update_layout(
        title=title,
        xaxis_title="Rater",
        yaxis_title="Rater",
        height=400,
    )

    return fig


def plot_code_frequency(
    frequency: pd.DataFrame,
    title: str = "Code Usage by Rater",
    max_label_length: int = 25,
) -> go.Figure:
    """Create heatmap of how often each rater applied each code.

    Args:
        frequency: DataFrame with codes as index, raters as columns
        title: Chart title
        max_label_length: Maximum length for code labels before truncation

    Returns:
        Plotly Figure
    """
    truncated = [truncate_label(str(c), max_label_length) for c in frequency.index]

    fig = px.imshow(
        frequency.values,
        x=frequency.columns.tolist(),
        y=truncated,
        color_continuous_scale="Blues",
        title=title,
        labels={"x": "Rater", "y": "Code", "color": "Segments"},
        text_auto=True,
    )

    fig.update_layout(
        height=max(400, len(frequency) * 25),
    )

    return fig


def plot_rater_impact(
    rater_impact: List[RaterImpact],
    title: str = "Rater Impact on Kappa",
) -> go.Figure:
    """Create bar chart showing kappa change when each rater is left out.

    Positive delta = removing rater improves kappa.
    Negative delta = removing rater lowers kappa.

    Args:
        rater_impact: List of RaterImpact objects
        title: Chart title

    Returns:
        Plotly Figure
    """
    df = pd.DataFrame([{
        "rater": r.rater,
        "delta": r.delta,
    } for r in rater_impact if r.delta is not None])

    fig = go.Figure()

    if not df.empty:
        colors = df["delta"].apply(
            lambda x: "red" if x > 0.02 else ("green" if x < -0.02 else "gray")
        )

        fig.add_trace(go.Bar(
            x=df["rater"],
            y=df["delta"],
            marker_color=colors,
            text=df["delta"].apply(lambda x: f"{x:+.3f}"),
            textposition="outside",
            hovertemplate=(
                "Rater: %{x}<br>"
                "Delta: %{y:.3f}<br>"
                "<extra></extra>"
            ),
        ))

    fig.add_hline(y=0, line_color="black", line_width=1)

    fig.update_layout(
        title=title,
        xaxis_title="Rater",
        yaxis_title="Kappa without rater - kappa with all",
        height=400,
    )

    return fig


def plot_kappa_interval(
    result: MezzichResult,
    title: str = "Mezzich's Kappa with Confidence Interval",
) -> go.Figure:
    """Create point-and-interval plot of the kappa estimate.

    Args:
        result: MezzichResult from compute_mezzich_kappa
        title: Chart title

    Returns:
        Plotly Figure
    """
    sig = result.significance
    kappa = result.kappa.kappa

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=[kappa],
        y=["κ"],
        mode="markers",
        marker=dict(size=14, color="#636EFA"),
        error_x=dict(
            type="data",
            symmetric=False,
            array=[sig.ci_upper - kappa],
            arrayminus=[kappa - sig.ci_lower],
        ),
        hovertemplate=(
            f"Kappa: {kappa:.3f}<br>"
            f"{sig.confidence_level:.0%} CI: {sig.ci_lower:.3f} to {sig.ci_upper:.3f}"
            "<extra></extra>"
        ),
        name="Kappa",
    ))

    fig.add_vline(x=0, line_color="black", line_width=1)

    fig.update_layout(
        title=title,
        xaxis_title="Mezzich's Kappa",
        height=250,
        showlegend=False,
    )

    return fig


def color_by_kappa(val: float) -> str:
    """Return CSS color string based on a kappa or agreement value.

    Args:
        val: Kappa or agreement value

    Returns:
        CSS color string
    """
    if pd.isna(val):
        return "background-color: #f0f0f0"
    elif val > 0.60:
        return "background-color: #90EE90"  # Light green
    elif val > 0.20:
        return "background-color: #FFE4B5"  # Light orange
    else:
        return "background-color: #FFB6C1"  # Light red
