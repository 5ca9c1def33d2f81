"""Per-segment disagreement analysis for multi-code rating."""

import itertools
from collections import defaultdict
from typing import List, Optional

import numpy as np
import pandas as pd

from .agreement import pair_agreement, segment_agreement
from .errors import UndefinedSegmentAgreement
from .models import AgreementSummary, Disagreement, RaterData


def find_disagreements(
    rater_data: RaterData,
    summary: Optional[AgreementSummary] = None,
) -> List[Disagreement]:
    """Find all segments where raters did not fully agree.

    Args:
        rater_data: RaterData instance
        summary: AgreementSummary from the same data; recomputed per segment
            when omitted

    Returns:
        List of Disagreement objects, in segment order
    """
    disagreements = []

    for segment in range(rater_data.n_segments):
        if summary is not None:
            agreement = summary.segment_agreements[segment]
        else:
            try:
                agreement, _ = segment_agreement(rater_data, segment)
            except UndefinedSegmentAgreement:
                continue  # Nothing to compare

        if agreement >= 1.0:
            continue

        rater_codes = {
            name: tuple(rater_data.labels_for(idx, segment))
            for idx, name in enumerate(rater_data.rater_names)
        }
        unscored = [name for name, codes in rater_codes.items() if not codes]

        if agreement == 0.0:
            dtype = "disjoint"  # No scoring pair shares a code
        elif unscored:
            dtype = "missing"
        else:
            dtype = "partial"

        disagreements.append(Disagreement(
            segment=segment,
            rater_codes=rater_codes,
            agreement=agreement,
            disagreement_type=dtype,
            severity=1.0 - agreement,
            unscored_raters=unscored,
        ))

    return disagreements


def disagreement_summary(rater_data: RaterData) -> pd.DataFrame:
    """Summarize disagreement for each rater pair.

    Args:
        rater_data: RaterData instance

    Returns:
        DataFrame with one row per rater pair
    """
    records = []

    for idx_a, idx_b in itertools.combinations(range(rater_data.n_raters), 2):
        values = []
        for segment in range(rater_data.n_segments):
            value = pair_agreement(
                rater_data.get_code_set(idx_a, segment),
                rater_data.get_code_set(idx_b, segment),
            )
            if value is not None:
                values.append(value)

        disagreeing = [v for v in values if v < 1.0]

        records.append({
            "rater_a": rater_data.rater_names[idx_a],
            "rater_b": rater_data.rater_names[idx_b],
            "shared_segments": len(values),
            "n_disagreements": len(disagreeing),
            "pct_disagreements": len(disagreeing) / len(values) * 100 if values else 0,
            "n_disjoint": sum(1 for v in disagreeing if v == 0.0),
            "mean_agreement": np.mean(values) if values else np.nan,
        })

    return pd.DataFrame(records)


def filter_disagreements(
    disagreements: List[Disagreement],
    rater: Optional[str] = None,
    disagreement_type: Optional[str] = None,
    min_severity: float = 0.0,
) -> List[Disagreement]:
    """Filter disagreements by various criteria.

    Args:
        disagreements: List of Disagreement objects
        rater: Keep segments this rater scored
        disagreement_type: Filter by type ("disjoint", "partial", "missing")
        min_severity: Minimum severity threshold

    Returns:
        Filtered list of Disagreement objects
    """
    filtered = disagreements

    if rater:
        filtered = [d for d in filtered if d.rater_codes.get(rater)]

    if disagreement_type:
        filtered = [d for d in filtered if d.disagreement_type == disagreement_type]

    if min_severity > 0:
        filtered = [d for d in filtered if d.severity >= min_severity]

    return filtered


def compute_rater_disagreement_profile(rater_data: RaterData) -> pd.DataFrame:
    """Compute how often each rater disagrees with the others.

    A rater is the outlier on a segment when at least three raters scored it
    and that rater's mean agreement with the others is strictly the lowest.

    Args:
        rater_data: RaterData instance

    Returns:
        DataFrame with rater disagreement profile
    """
    counts = defaultdict(lambda: {"scored": 0, "involved": 0, "as_outlier": 0})

    for segment in range(rater_data.n_segments):
        code_sets = rater_data.segment_code_sets(segment)
        scoring = [i for i, codes in enumerate(code_sets) if codes]

        for i in scoring:
            counts[i]["scored"] += 1

        if len(scoring) < 2:
            continue

        mean_with_others = {}
        for i in scoring:
            values = [pair_agreement(code_sets[i], code_sets[j]) for j in scoring if j != i]
            mean_with_others[i] = sum(values) / len(values)

        if all(v >= 1.0 for v in mean_with_others.values()):
            continue

        for i in scoring:
            counts[i]["involved"] += 1

        if len(scoring) >= 3:
            lowest = min(mean_with_others.values())
            at_lowest = [i for i, v in mean_with_others.items() if v == lowest]
            if len(at_lowest) == 1:
                counts[at_lowest[0]]["as_outlier"] += 1

    records = []
    for idx, name in enumerate(rater_data.rater_names):
        c = counts[idx]
        records.append({
            "rater": name,
            "segments_scored": c["scored"],
            "disagreements_involved": c["involved"],
            "pct_involved": c["involved"] / c["scored"] * 100 if c["scored"] > 0 else 0,
            "times_as_outlier": c["as_outlier"],
            "outlier_rate": c["as_outlier"] / c["involved"] * 100 if c["involved"] > 0 else 0,
        })

    return pd.DataFrame(records)


def code_frequency_table(rater_data: RaterData) -> pd.DataFrame:
    """Count how many segments each rater applied each code to.

    Returns:
        DataFrame with code labels as index and rater names as columns
    """
    if rater_data.code_labels:
        n_codes = len(rater_data.code_labels)
    else:
        n_codes = 1 + max(
            (c for rater in rater_data.raters for codes in rater for c in codes),
            default=-1,
        )

    counts = np.zeros((n_codes, rater_data.n_raters), dtype=int)
    for r, rater in enumerate(rater_data.raters):
        for codes in rater:
            for c in codes:
                counts[c, r] += 1

    return pd.DataFrame(
        counts,
        index=[rater_data.code_label(c) for c in range(n_codes)],
        columns=list(rater_data.rater_names),
    )
