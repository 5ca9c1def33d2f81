"""Report assembly for Mezzich's Kappa results."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .errors import (
    DataLoadError,
    DegenerateExpectedAgreement,
    InvalidDegreesOfFreedom,
    MalformedCodeSet,
    MezzichKappaError,
    NoCodingSchemesRecorded,
    UndefinedSegmentAgreement,
    ZeroStandardError,
)
from .mezzich import interpret_kappa
from .models import MezzichResult

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def format_confidence_level(confidence_level: float) -> str:
    return f"{confidence_level * 100:g}%"


def agreement_rows(result: MezzichResult, input_names: Sequence[str] = ()) -> List[Tuple[str, str]]:
    """Labelled agreement statistics."""
    summary = result.summary

    rows = []
    if input_names:
        rows.append(("Input files", "; ".join(input_names)))
    rows.extend([
        ("Segments analyzed", str(result.segment_count)),
        ("Unique coding schemes", str(summary.coding_scheme_count)),
        ("Total proportional agreement", str(summary.total_proportional_agreement)),
        ("Observed agreement (Po)", str(summary.observed_agreement)),
        ("Expected agreement (Pc)", str(summary.expected_agreement)),
    ])
    return rows


def kappa_rows(result: MezzichResult) -> List[Tuple[str, str]]:
    """Labelled kappa and t-test statistics."""
    sig = result.significance

    return [
        ("Mezzich's Kappa", str(result.kappa.kappa)),
        ("Standard error", str(result.kappa.std_error)),
        ("df", str(sig.degrees_of_freedom)),
        ("t", f"{sig.t_statistic:0.4f}"),
        ("p", f"{sig.p_value:0.16f}"),
        (
            f"{format_confidence_level(sig.confidence_level)} Confidence Interval",
            f"{sig.ci_lower:0.3f} - {sig.ci_upper:0.3f}",
        ),
    ]


def summary_rows(result: MezzichResult, input_names: Sequence[str] = ()) -> List[Tuple[str, str]]:
    """All labelled summary statistics, in report order."""
    return agreement_rows(result, input_names) + kappa_rows(result)


def segment_table(result: MezzichResult) -> pd.DataFrame:
    """One row per segment with each rater's code labels and the segment agreement."""
    records = []
    for detail in result.segments:
        row = {"Segment": detail.segment + 1}
        for name, codes in zip(result.rater_names, detail.rater_codes):
            row[f"{name} Codes"] = ", ".join(codes)
        row["Proportional Agreement"] = detail.agreement
        records.append(row)

    columns = ["Segment"] + [f"{name} Codes" for name in result.rater_names] + ["Proportional Agreement"]
    return pd.DataFrame(records, columns=columns)


def report_csv(result: MezzichResult, input_names: Sequence[str] = ()) -> str:
    """Render the CSV report: agreement block, kappa block, then the segment table."""
    blocks = [
        pd.DataFrame(agreement_rows(result, input_names)),
        pd.DataFrame(kappa_rows(result)),
    ]
    return (
        "\n".join(df.to_csv(header=False, index=False, lineterminator="\n") for df in blocks)
        + "\n"
        + segment_table(result).to_csv(index=False, lineterminator="\n")
    )


def report_filename(n_raters: int, timestamp: Optional[datetime] = None) -> str:
    timestamp = timestamp or datetime.now()
    return f"mkappa_r{n_raters}_{timestamp.strftime(TIMESTAMP_FORMAT)}.csv"


def write_report(
    result: MezzichResult,
    output_dir: Union[str, Path] = ".",
    input_names: Sequence[str] = (),
    timestamp: Optional[datetime] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> Path:
    """Write the CSV report: summary block, a blank line, then the segment table.

    Args:
        result: MezzichResult to report
        output_dir: Directory for the timestamped report file
        input_names: Input file names, listed in the summary
        timestamp: Time used in the file name (defaults to now)
        output_path: Explicit file path; overrides output_dir and the naming scheme

    Returns:
        Path of the written report
    """
    if output_path is not None:
        path = Path(output_path)
    else:
        path = Path(output_dir) / report_filename(result.n_raters, timestamp)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        f.write(report_csv(result, input_names))

    logger.info("Wrote report to %s", path)
    return path


def generate_basic_report(result: MezzichResult, metadata: Optional[Dict[str, str]] = None) -> str:
    """Generate a Markdown report without an LLM."""
    metadata = metadata or {}
    sig = result.significance
    interp, _ = interpret_kappa(result.kappa.kappa)
    level = format_confidence_level(sig.confidence_level)

    lines = [
        "# Inter-Rater Reliability Report",
        f"## {metadata.get('Study Name', 'Study')}",
        "",
        "---",
        "",
        "## Executive Summary",
        "",
        f"This report presents Mezzich's Kappa for {metadata.get('Codebook', 'the study')}.",
        f"**{result.n_raters} raters** coded **{result.segment_count} segments**, "
        f"producing **{result.summary.coding_scheme_count} coding schemes**.",
        "",
        f"**Mezzich's Kappa: {result.kappa.kappa:.3f}** ({interp}), "
        f"SE = {result.kappa.std_error:.4f}, "
        f"t({sig.degrees_of_freedom}) = {sig.t_statistic:.3f}, p = {sig.p_value:.4g}, "
        f"{level} CI [{sig.ci_lower:.3f}, {sig.ci_upper:.3f}]",
        "",
        "| Statistic | Value |",
        "|-----------|-------|",
        f"| Observed agreement (Po) | {result.summary.observed_agreement:.4f} |",
        f"| Expected agreement (Pc) | {result.summary.expected_agreement:.4f} |",
        f"| Total proportional agreement | {result.summary.total_proportional_agreement:.4f} |",
        "",
        "---",
        "",
        "## Segment Agreement",
        "",
        "| Segment | Agreement | Valid Pairs |",
        "|---------|-----------|-------------|",
    ]

    for s in result.segments:
        lines.append(f"| {s.segment + 1} | {s.agreement:.3f} | {s.valid_pairs} |")

    lines.extend([
        "",
        "---",
        "",
        "## Interpretation Guidelines",
        "",
        "- **κ > 0.80**: Almost perfect agreement",
        "- **0.60 < κ ≤ 0.80**: Substantial agreement",
        "- **0.40 < κ ≤ 0.60**: Moderate agreement",
        "- **0.20 < κ ≤ 0.40**: Fair agreement",
        "- **κ ≤ 0.20**: Slight or poor agreement",
        "",
        "*Bands from Landis, J. R. & Koch, G. G. (1977). Biometrics 33(1):159-174. "
        "Mezzich's Kappa from Mezzich, J. E. et al. (1981). J Psych Res 16:29-39.*",
    ])

    return "\n".join(lines)


_FAILURE_HINTS = {
    MalformedCodeSet: "Check that every code column is covered by the header row and that cells hold 0 or 1.",
    UndefinedSegmentAgreement: "Every segment needs at least two raters who applied a code. "
                               "Remove the segment or add a rater who scored it.",
    NoCodingSchemesRecorded: "The input tables contain no cells equal to 1.",
    DegenerateExpectedAgreement: "Expected agreement equals 1, so kappa cannot be computed.",
    InvalidDegreesOfFreedom: "At least two segments are needed to test kappa for significance.",
    ZeroStandardError: "Observed agreement equals expected agreement, so kappa is 0 "
                       "and its t statistic is undefined.",
    DataLoadError: "Check the file format: one CSV/XLSX per rater, one column per code, one row per segment.",
}


def render_failure(error: MezzichKappaError) -> str:
    """Explanatory message for a failed run."""
    for kind, hint in _FAILURE_HINTS.items():
        if isinstance(error, kind):
            return f"{error}\n{hint}"
    return str(error)
