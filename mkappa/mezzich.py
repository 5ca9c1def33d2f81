"""Mezzich's Kappa estimation and significance testing.

Reference: Mezzich JE et al. Assessment of Agreement Among Several Raters
Formulating Multiple Diagnoses. J Psych Res 1981 16(29):29-39.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np
from scipy import stats

from .agreement import aggregate_agreement
from .errors import (
    DegenerateExpectedAgreement,
    InvalidDegreesOfFreedom,
    MezzichKappaError,
    ZeroStandardError,
)
from .models import (
    DEFAULT_CONFIDENCE_LEVEL,
    AgreementSummary,
    KappaResult,
    MezzichResult,
    PairwiseResult,
    RaterData,
    RaterImpact,
    SegmentDetail,
    SignificanceResult,
    validate_confidence_level,
)

logger = logging.getLogger(__name__)


def estimate_kappa(summary: AgreementSummary, segment_count: int) -> KappaResult:
    """Compute Mezzich's Kappa and its standard error.

    Args:
        summary: Observed and expected agreement
        segment_count: Number of segments analyzed

    Returns:
        KappaResult with kappa = (Po - Pc) / (1 - Pc) and
        std_error = (Po - Pc) / (sqrt(n) * (1 - Pc))

    Raises:
        DegenerateExpectedAgreement: Pc equals 1
    """
    po = summary.observed_agreement
    pc = summary.expected_agreement

    if np.isclose(pc, 1.0, rtol=0.0, atol=1e-12):
        raise DegenerateExpectedAgreement(pc)

    kappa = (po - pc) / (1 - pc)
    std_error = (po - pc) / (math.sqrt(segment_count) * (1 - pc))

    return KappaResult(kappa=kappa, std_error=std_error)


def test_significance(
    kappa: float,
    std_error: float,
    degrees_of_freedom: int,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> SignificanceResult:
    """One-sample t-test of kappa against zero.

    Args:
        kappa: Kappa estimate
        std_error: Standard error of the estimate
        degrees_of_freedom: segment_count - 1
        confidence_level: Two-sided confidence level for the interval

    Returns:
        SignificanceResult with t, df, two-tailed p and confidence interval

    Raises:
        InvalidDegreesOfFreedom: Fewer than one degree of freedom
        ZeroStandardError: std_error is 0
        InvalidConfiguration: confidence_level outside (0, 1)
    """
    if degrees_of_freedom < 1:
        raise InvalidDegreesOfFreedom(degrees_of_freedom)
    validate_confidence_level(confidence_level)
    if std_error == 0:
        raise ZeroStandardError()

    t_stat = kappa / std_error
    p_value = float(2 * stats.t.sf(abs(t_stat), degrees_of_freedom))

    t_crit = float(stats.t.ppf((1 + confidence_level) / 2, degrees_of_freedom))
    margin = t_crit * abs(std_error)

    return SignificanceResult(
        t_statistic=t_stat,
        degrees_of_freedom=degrees_of_freedom,
        p_value=p_value,
        confidence_level=confidence_level,
        ci_lower=kappa - margin,
        ci_upper=kappa + margin,
    )


# Keep pytest from collecting this when imported into a test module.
test_significance.__test__ = False


def build_segment_details(rater_data: RaterData, summary: AgreementSummary) -> Tuple[SegmentDetail, ...]:
    """Resolve each segment's code labels per rater alongside its agreement."""
    return tuple(
        SegmentDetail(
            segment=segment,
            rater_codes=tuple(
                tuple(rater_data.labels_for(rater, segment))
                for rater in range(rater_data.n_raters)
            ),
            agreement=summary.segment_agreements[segment],
            valid_pairs=summary.valid_pair_counts[segment],
        )
        for segment in range(summary.segment_count)
    )


def compute_mezzich_kappa(
    rater_data: RaterData,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> MezzichResult:
    """Run the full pipeline: agreement, kappa, t-test and segment detail.

    Args:
        rater_data: RaterData instance
        confidence_level: Confidence level for the kappa interval

    Returns:
        MezzichResult

    Raises:
        MezzichKappaError: Any failure; no partial result is returned
    """
    validate_confidence_level(confidence_level)

    summary = aggregate_agreement(rater_data)
    kappa = estimate_kappa(summary, summary.segment_count)
    significance = test_significance(
        kappa.kappa,
        kappa.std_error,
        summary.segment_count - 1,
        confidence_level,
    )

    logger.info(
        "Mezzich's Kappa for %d raters over %d segments: %.4f (SE %.4f, p %.4g)",
        rater_data.n_raters, summary.segment_count,
        kappa.kappa, kappa.std_error, significance.p_value,
    )

    return MezzichResult(
        rater_names=rater_data.rater_names,
        summary=summary,
        kappa=kappa,
        significance=significance,
        segments=build_segment_details(rater_data, summary),
    )


def compute_rater_impact(rater_data: RaterData, kappa: float) -> List[RaterImpact]:
    """Recompute kappa with each rater left out.

    Needs at least three raters so that two remain. A leave-one-out dataset
    that cannot produce a kappa (e.g. a segment only the removed rater shared)
    is recorded with its error message instead of raising.

    Args:
        rater_data: RaterData instance
        kappa: Kappa with all raters

    Returns:
        List of RaterImpact, sorted with the largest improvement first
    """
    if rater_data.n_raters < 3:
        return []

    results = []
    for idx, name in enumerate(rater_data.rater_names):
        keep = [i for i in range(rater_data.n_raters) if i != idx]
        try:
            summary = aggregate_agreement(rater_data.with_raters(keep))
            kappa_without = estimate_kappa(summary, summary.segment_count).kappa
        except MezzichKappaError as e:
            logger.warning("Kappa without %s could not be computed: %s", name, e)
            results.append(RaterImpact(rater=name, kappa_without=None, delta=None, error=str(e)))
            continue

        results.append(RaterImpact(
            rater=name,
            kappa_without=kappa_without,
            delta=kappa_without - kappa,
        ))

    results.sort(key=lambda r: r.delta if r.delta is not None else -math.inf, reverse=True)
    return results


def interpret_kappa(kappa: Optional[float]) -> Tuple[str, str]:
    """Interpret a kappa value using the Landis & Koch (1977) bands.

    Args:
        kappa: Kappa value

    Returns:
        Tuple of (interpretation label, color for display)
    """
    if kappa is None or np.isnan(kappa):
        return "Cannot compute", "gray"
    elif kappa > 0.80:
        return "Almost perfect", "green"
    elif kappa > 0.60:
        return "Substantial", "green"
    elif kappa > 0.40:
        return "Moderate", "orange"
    elif kappa > 0.20:
        return "Fair", "orange"
    elif kappa >= 0.0:
        return "Slight", "red"
    else:
        return "Poor", "red"


def results_summary(
    result: MezzichResult,
    pairwise: Optional[List[PairwiseResult]] = None,
    rater_impact: Optional[List[RaterImpact]] = None,
) -> str:
    """Generate a text summary of all results.

    Args:
        result: MezzichResult from compute_mezzich_kappa
        pairwise: Pairwise rater agreement
        rater_impact: Leave-one-rater-out results

    Returns:
        Summary text for LLM context
    """
    sig = result.significance
    level = f"{sig.confidence_level:.0%}"

    lines = [
        f"MEZZICH'S KAPPA: {result.kappa.kappa:.3f} ({interpret_kappa(result.kappa.kappa)[0]})",
        f"  Standard error: {result.kappa.std_error:.4f}",
        f"  t({sig.degrees_of_freedom}) = {sig.t_statistic:.4f}, p = {sig.p_value:.4g}",
        f"  {level} CI: {sig.ci_lower:.3f} to {sig.ci_upper:.3f}",
        "",
        f"Raters: {result.n_raters} ({', '.join(result.rater_names)})",
        f"Segments analyzed: {result.segment_count}",
        f"Coding schemes: {result.summary.coding_scheme_count}",
        f"Observed agreement (Po): {result.summary.observed_agreement:.3f}",
        f"Expected agreement (Pc): {result.summary.expected_agreement:.3f}",
    ]

    if pairwise:
        lines.append("")
        lines.append("PAIRWISE RATER AGREEMENT (mean proportional agreement):")
        for p in pairwise:
            value = f"{p.mean_agreement:.3f}" if p.mean_agreement is not None else "n/a"
            lines.append(f"  - {p.rater_a} vs {p.rater_b}: {value} over {p.shared_segments} segments")

    if rater_impact:
        lines.append("")
        lines.append("RATER IMPACT (kappa change when removed):")
        for r in rater_impact:
            if r.delta is None:
                lines.append(f"  - {r.rater}: cannot compute ({r.error})")
            else:
                effect = "improves" if r.delta > 0 else "reduces"
                lines.append(f"  - {r.rater}: {r.delta:+.3f} (removal {effect} kappa)")

    low_segments = [s for s in result.segments if s.agreement < 0.5]
    if low_segments:
        lines.append("")
        lines.append("SEGMENTS NEEDING ATTENTION (agreement < 0.50):")
        for s in low_segments:
            lines.append(f"  - Segment {s.segment + 1}: {s.agreement:.3f}")

    return "\n".join(lines)
