"""Data models for the Mezzich's Kappa calculator."""

import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .errors import InvalidConfiguration, MalformedCodeSet

DEFAULT_CONFIDENCE_LEVEL = 0.95

CodeSet = FrozenSet[int]

_EMPTY: CodeSet = frozenset()


def _normalize_code(code: Any, vocabulary_size: Optional[int], rater: int, segment: int) -> int:
    if isinstance(code, bool):
        raise MalformedCodeSet(f"code {code!r} is not an integer index", rater, segment)
    if isinstance(code, numbers.Integral):
        index = int(code)
    elif isinstance(code, numbers.Real) and float(code).is_integer():
        index = int(code)
    else:
        raise MalformedCodeSet(f"code {code!r} is not an integer index", rater, segment)

    if index < 0:
        raise MalformedCodeSet(f"code index {index} is negative", rater, segment)
    if vocabulary_size is not None and index >= vocabulary_size:
        raise MalformedCodeSet(
            f"code index {index} is outside the {vocabulary_size} declared codes",
            rater,
            segment,
        )
    return index


@dataclass(frozen=True)
class RaterData:
    """Canonical data structure for a Mezzich's Kappa run.

    Attributes:
        raters: One sequence per rater; entry i is the set of code indices the
            rater marked present for segment i (empty = not scored)
        rater_names: Optional display names, one per rater
        code_labels: Optional ordered code names (the header row)
    """
    raters: Tuple[Tuple[CodeSet, ...], ...]
    rater_names: Tuple[str, ...] = ()
    code_labels: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        labels = tuple(str(label) for label in self.code_labels) if self.code_labels else None
        vocabulary_size = len(labels) if labels is not None else None

        raters = []
        for rater_idx, segments in enumerate(self.raters):
            entries = []
            for segment_idx, codes in enumerate(segments):
                entries.append(frozenset(
                    _normalize_code(code, vocabulary_size, rater_idx, segment_idx)
                    for code in (codes if codes is not None else ())
                ))
            raters.append(tuple(entries))

        names = tuple(str(name) for name in self.rater_names)
        if names and len(names) != len(raters):
            raise InvalidConfiguration(
                f"Got {len(names)} rater names for {len(raters)} raters"
            )
        if not names:
            names = tuple(f"Rater {i + 1}" for i in range(len(raters)))
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            # Per-rater outputs are keyed by name
            raise InvalidConfiguration(
                f"Rater names must be unique; repeated: {', '.join(duplicates)}"
            )

        object.__setattr__(self, "raters", tuple(raters))
        object.__setattr__(self, "rater_names", names)
        object.__setattr__(self, "code_labels", labels)

    @classmethod
    def from_code_lists(
        cls,
        raters: Iterable[Iterable[Iterable[int]]],
        rater_names: Optional[Sequence[str]] = None,
        code_labels: Optional[Sequence[str]] = None,
    ) -> "RaterData":
        """Build from plain nested lists, e.g. ``[[[0], [0, 1], []], ...]``."""
        return cls(
            raters=tuple(tuple(frozenset(codes) for codes in rater) for rater in raters),
            rater_names=tuple(rater_names or ()),
            code_labels=tuple(code_labels) if code_labels is not None else None,
        )

    @property
    def n_raters(self) -> int:
        return len(self.raters)

    @property
    def n_segments(self) -> int:
        """Length of the segment axis: the longest rater sequence."""
        return max((len(r) for r in self.raters), default=0)

    def get_code_set(self, rater: int, segment: int) -> CodeSet:
        """Return a rater's codes for a segment, empty past the rater's last entry."""
        entries = self.raters[rater]
        if segment < len(entries):
            return entries[segment]
        return _EMPTY

    def segment_code_sets(self, segment: int) -> List[CodeSet]:
        return [self.get_code_set(r, segment) for r in range(self.n_raters)]

    def code_label(self, code: int) -> str:
        if self.code_labels:
            return self.code_labels[code]
        return f"c{code + 1}"

    def labels_for(self, rater: int, segment: int) -> List[str]:
        return [self.code_label(c) for c in sorted(self.get_code_set(rater, segment))]

    def with_raters(self, indices: Sequence[int]) -> "RaterData":
        """Return a copy restricted to the given rater positions."""
        return RaterData(
            raters=tuple(self.raters[i] for i in indices),
            rater_names=tuple(self.rater_names[i] for i in indices),
            code_labels=self.code_labels,
        )


@dataclass
class AnalysisConfig:
    """Settings for one analysis run."""
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    code_labels: Optional[List[str]] = None
    rater_names: Optional[List[str]] = None
    output_dir: str = "."
    min_severity: float = 0.0

    def __post_init__(self):
        validate_confidence_level(self.confidence_level)
        if not 0.0 <= self.min_severity <= 1.0:
            raise InvalidConfiguration(
                f"min_severity must lie in [0, 1], got {self.min_severity}"
            )

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AnalysisConfig":
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        if "confidence_level" in known:
            known["confidence_level"] = float(known["confidence_level"])
        return cls(**known)


def validate_confidence_level(confidence_level: float) -> float:
    if not 0.0 < confidence_level < 1.0:
        raise InvalidConfiguration(
            f"Confidence level must lie strictly between 0 and 1, got {confidence_level}"
        )
    return confidence_level


@dataclass(frozen=True)
class AgreementSummary:
    """Aggregate agreement across all segments."""
    segment_agreements: Tuple[float, ...]
    valid_pair_counts: Tuple[int, ...]
    coding_scheme_count: int
    total_proportional_agreement: float
    observed_agreement: float  # Po
    expected_agreement: float  # Pc

    @property
    def segment_count(self) -> int:
        return len(self.segment_agreements)


@dataclass(frozen=True)
class KappaResult:
    kappa: float
    std_error: float


@dataclass(frozen=True)
class SignificanceResult:
    t_statistic: float
    degrees_of_freedom: int
    p_value: float
    confidence_level: float
    ci_lower: float
    ci_upper: float

    @property
    def confidence_interval(self) -> Tuple[float, float]:
        return self.ci_lower, self.ci_upper


@dataclass(frozen=True)
class SegmentDetail:
    """Diagnostic detail for a single segment."""
    segment: int  # 0-based
    rater_codes: Tuple[Tuple[str, ...], ...]
    agreement: float
    valid_pairs: int

    def to_dict(self, rater_names: Sequence[str]) -> Dict[str, Any]:
        result: Dict[str, Any] = {"segment": self.segment + 1}
        for name, codes in zip(rater_names, self.rater_codes):
            result[name] = ", ".join(codes)
        result["proportional_agreement"] = self.agreement
        result["valid_pairs"] = self.valid_pairs
        return result


@dataclass(frozen=True)
class MezzichResult:
    """Everything a report needs from one run."""
    rater_names: Tuple[str, ...]
    summary: AgreementSummary
    kappa: KappaResult
    significance: SignificanceResult
    segments: Tuple[SegmentDetail, ...]

    @property
    def n_raters(self) -> int:
        return len(self.rater_names)

    @property
    def segment_count(self) -> int:
        return self.summary.segment_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_raters": self.n_raters,
            "segment_count": self.segment_count,
            "coding_scheme_count": self.summary.coding_scheme_count,
            "total_proportional_agreement": self.summary.total_proportional_agreement,
            "observed_agreement": self.summary.observed_agreement,
            "expected_agreement": self.summary.expected_agreement,
            "kappa": self.kappa.kappa,
            "std_error": self.kappa.std_error,
            "degrees_of_freedom": self.significance.degrees_of_freedom,
            "t_statistic": self.significance.t_statistic,
            "p_value": self.significance.p_value,
            "confidence_level": self.significance.confidence_level,
            "ci_lower": self.significance.ci_lower,
            "ci_upper": self.significance.ci_upper,
        }

    def segments_to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([s.to_dict(self.rater_names) for s in self.segments])


@dataclass
class PairwiseResult:
    """Mean proportional agreement between two raters over shared segments."""
    rater_a: str
    rater_b: str
    mean_agreement: Optional[float]
    shared_segments: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rater_a": self.rater_a,
            "rater_b": self.rater_b,
            "mean_agreement": self.mean_agreement,
            "shared_segments": self.shared_segments,
        }


@dataclass
class RaterImpact:
    """Kappa recomputed with one rater left out."""
    rater: str
    kappa_without: Optional[float]
    delta: Optional[float]  # kappa_without - kappa
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rater": self.rater,
            "kappa_without": self.kappa_without,
            "delta": self.delta,
            "error": self.error,
        }


@dataclass
class Disagreement:
    """A segment where raters did not fully agree."""
    segment: int  # 0-based
    rater_codes: Dict[str, Tuple[str, ...]]  # {"Rater 1": ("c1", "c2"), ...}
    agreement: float
    disagreement_type: str  # "disjoint", "partial", "missing"
    severity: float  # 1 - agreement
    unscored_raters: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "segment": self.segment + 1,
            "agreement": self.agreement,
            "disagreement_type": self.disagreement_type,
            "severity": self.severity,
        }
        result.update({rater: ", ".join(codes) for rater, codes in self.rater_codes.items()})
        return result


def pairwise_to_dataframe(results: List[PairwiseResult]) -> pd.DataFrame:
    """Convert list of PairwiseResult to DataFrame."""
    return pd.DataFrame([r.to_dict() for r in results])


def impact_to_dataframe(results: List[RaterImpact]) -> pd.DataFrame:
    """Convert list of RaterImpact to DataFrame."""
    return pd.DataFrame([r.to_dict() for r in results])


def disagreements_to_dataframe(disagreements: List[Disagreement]) -> pd.DataFrame:
    """Convert list of Disagreement to DataFrame."""
    return pd.DataFrame([d.to_dict() for d in disagreements])
