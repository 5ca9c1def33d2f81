"""Mezzich's Kappa for several raters applying multiple codes per segment."""

from .models import (
    AgreementSummary,
    AnalysisConfig,
    Disagreement,
    KappaResult,
    MezzichResult,
    PairwiseResult,
    RaterData,
    RaterImpact,
    SegmentDetail,
    SignificanceResult,
)
from .errors import (
    DataLoadError,
    DegenerateExpectedAgreement,
    InvalidConfiguration,
    InvalidDegreesOfFreedom,
    MalformedCodeSet,
    MezzichKappaError,
    NoCodingSchemesRecorded,
    UndefinedSegmentAgreement,
    ZeroStandardError,
)
from .agreement import (
    pair_agreement,
    segment_agreement,
    count_coding_schemes,
    aggregate_agreement,
    compute_pairwise_rater_agreement,
)
from .mezzich import (
    estimate_kappa,
    test_significance,
    compute_mezzich_kappa,
    compute_rater_impact,
    interpret_kappa,
)
from .data_transformer import transform_to_rater_data, load_rater_file
from .disagreement_analyzer import find_disagreements, disagreement_summary
from .report import write_report, segment_table

__all__ = [
    'AgreementSummary',
    'AnalysisConfig',
    'Disagreement',
    'KappaResult',
    'MezzichResult',
    'PairwiseResult',
    'RaterData',
    'RaterImpact',
    'SegmentDetail',
    'SignificanceResult',
    'DataLoadError',
    'DegenerateExpectedAgreement',
    'InvalidConfiguration',
    'InvalidDegreesOfFreedom',
    'MalformedCodeSet',
    'MezzichKappaError',
    'NoCodingSchemesRecorded',
    'UndefinedSegmentAgreement',
    'ZeroStandardError',
    'pair_agreement',
    'segment_agreement',
    'count_coding_schemes',
    'aggregate_agreement',
    'compute_pairwise_rater_agreement',
    'estimate_kappa',
    'test_significance',
    'compute_mezzich_kappa',
    'compute_rater_impact',
    'interpret_kappa',
    'transform_to_rater_data',
    'load_rater_file',
    'find_disagreements',
    'disagreement_summary',
    'write_report',
    'segment_table',
]
