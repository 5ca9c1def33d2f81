"""Visualization components for the Mezzich's Kappa calculator."""

from .charts import (
    plot_segment_agreement,
    plot_pairwise_heatmap,
    plot_code_frequency,
    plot_rater_impact,
    plot_kappa_interval,
)

__all__ = [
    'plot_segment_agreement',
    'plot_pairwise_heatmap',
    'plot_code_frequency',
    'plot_rater_impact',
    'plot_kappa_interval',
]
