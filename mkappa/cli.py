#!/usr/bin/env python
"""
Compute Mezzich's Kappa for N raters from one code-presence table per rater.
"""

import argparse
import logging
import sys
from pathlib import Path

from .data_transformer import transform_to_rater_data
from .errors import MezzichKappaError
from .mezzich import compute_mezzich_kappa, interpret_kappa
from .models import DEFAULT_CONFIDENCE_LEVEL, AnalysisConfig
from .report import render_failure, write_report

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mkappa",
        description="Compute Mezzich's Kappa for several raters with one or more codes per segment",
    )
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="One CSV/XLSX per rater: one column per code, one row per segment, cells 0 or 1",
    )
    parser.add_argument(
        "--confidence_level",
        type=float,
        default=DEFAULT_CONFIDENCE_LEVEL,
        help="Confidence level for the kappa interval (default: 0.95)",
    )
    parser.add_argument(
        "--output_dir",
        type=Path,
        default=Path("."),
        help="Directory for the timestamped report (default: current directory)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Explicit report path (default: output_dir/mkappa_r<N>_<timestamp>.csv)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(args.files) < 2:
        parser.error("at least two rater files are required")

    for path in args.files:
        if not path.exists():
            parser.error(f"file not found: {path}")

    try:
        config = AnalysisConfig(
            confidence_level=args.confidence_level,
            output_dir=str(args.output_dir),
        )
        rater_data = transform_to_rater_data(args.files, config)
        result = compute_mezzich_kappa(rater_data, config.confidence_level)
    except MezzichKappaError as e:
        print(f"Error: {render_failure(e)}", file=sys.stderr)
        return 1

    report_path = write_report(
        result,
        output_dir=config.output_dir,
        input_names=[str(p) for p in args.files],
        output_path=args.output,
    )

    sig = result.significance
    print(f"Raters: {result.n_raters}, segments: {result.segment_count}")
    print(
        f"Mezzich's Kappa: {result.kappa.kappa:.4f} ({interpret_kappa(result.kappa.kappa)[0]}), "
        f"SE {result.kappa.std_error:.4f}"
    )
    print(f"t({sig.degrees_of_freedom}) = {sig.t_statistic:.4f}, p = {sig.p_value:.4g}")
    print(f"Report written to {report_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
