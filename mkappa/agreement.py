"""Proportional agreement between raters' code sets."""

import itertools
import logging
from typing import AbstractSet, List, Optional, Tuple

from .errors import NoCodingSchemesRecorded, UndefinedSegmentAgreement
from .models import AgreementSummary, PairwiseResult, RaterData

logger = logging.getLogger(__name__)


def pair_agreement(a: AbstractSet[int], b: AbstractSet[int]) -> Optional[float]:
    """Compute proportional agreement between two raters for one segment.

    Args:
        a: Codes applied by the first rater
        b: Codes applied by the second rater

    Returns:
        |a & b| / |a | b|, or None when either rater applied no code. A pair of
        non-empty sets with no overlap gives 0.0, which is a real agreement value.
    """
    if not a or not b:
        return None
    return len(a & b) / len(a | b)


def segment_agreement(rater_data: RaterData, segment: int) -> Tuple[float, int]:
    """Mean agreement over every rater pair that both scored a segment.

    Args:
        rater_data: RaterData instance
        segment: 0-based segment index

    Returns:
        Tuple of (segment agreement, number of valid pairs)

    Raises:
        UndefinedSegmentAgreement: No pair of raters both scored the segment
    """
    code_sets = rater_data.segment_code_sets(segment)

    total = 0.0
    valid_pairs = 0
    for a, b in itertools.combinations(code_sets, 2):
        value = pair_agreement(a, b)
        if value is None:
            continue
        total += value
        valid_pairs += 1

    if valid_pairs == 0:
        raise UndefinedSegmentAgreement(segment)

    return total / valid_pairs, valid_pairs


def count_coding_schemes(rater_data: RaterData) -> int:
    """Number of non-empty (rater, segment) entries across the dataset."""
    return sum(
        1
        for rater in range(rater_data.n_raters)
        for segment in range(rater_data.n_segments)
        if rater_data.get_code_set(rater, segment)
    )


def aggregate_agreement(rater_data: RaterData) -> AgreementSummary:
    """Combine segment agreements into observed and expected agreement.

    Po is the mean segment agreement; Pc is the total proportional agreement
    divided by the number of coding schemes.

    Raises:
        NoCodingSchemesRecorded: No rater applied any code
        UndefinedSegmentAgreement: Some segment has no valid rater pair
    """
    coding_schemes = count_coding_schemes(rater_data)
    if coding_schemes == 0:
        raise NoCodingSchemesRecorded()

    agreements = []
    pair_counts = []
    for segment in range(rater_data.n_segments):
        value, pairs = segment_agreement(rater_data, segment)
        agreements.append(value)
        pair_counts.append(pairs)

    total = sum(agreements)
    segment_count = len(agreements)

    logger.debug(
        "Aggregated %d segments from %d raters: total=%r, coding schemes=%d",
        segment_count, rater_data.n_raters, total, coding_schemes,
    )

    return AgreementSummary(
        segment_agreements=tuple(agreements),
        valid_pair_counts=tuple(pair_counts),
        coding_scheme_count=coding_schemes,
        total_proportional_agreement=total,
        observed_agreement=total / segment_count,
        expected_agreement=total / coding_schemes,
    )


def compute_pairwise_rater_agreement(rater_data: RaterData) -> List[PairwiseResult]:
    """Compute mean agreement for each rater pair over the segments both scored.

    Args:
        rater_data: RaterData instance

    Returns:
        List of PairwiseResult, one per unordered rater pair
    """
    results = []

    for idx_a, idx_b in itertools.combinations(range(rater_data.n_raters), 2):
        values = []
        for segment in range(rater_data.n_segments):
            value = pair_agreement(
                rater_data.get_code_set(idx_a, segment),
                rater_data.get_code_set(idx_b, segment),
            )
            if value is not None:
                values.append(value)

        results.append(PairwiseResult(
            rater_a=rater_data.rater_names[idx_a],
            rater_b=rater_data.rater_names[idx_b],
            mean_agreement=sum(values) / len(values) if values else None,
            shared_segments=len(values),
        ))

    return results
