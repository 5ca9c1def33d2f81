"""Data transformation utilities for loading rater code-presence tables."""

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import DataLoadError
from .models import AnalysisConfig, CodeSet, RaterData

logger = logging.getLogger(__name__)

_LETTER = re.compile(r"[A-Za-z]")


def _file_name(file: Any) -> str:
    return file.name if hasattr(file, 'name') else str(file)


def _file_path(file: Any) -> str:
    """Full path for paths, upload name for file objects."""
    if isinstance(file, (str, Path)):
        return str(file)
    return _file_name(file)


def _read_text(file: Any) -> str:
    if hasattr(file, 'read'):
        data = file.read()
        return data.decode('utf-8-sig') if isinstance(data, bytes) else data
    return Path(file).read_text(encoding='utf-8-sig')


def _read_csv(file: Any, nrows: Optional[int] = None) -> pd.DataFrame:
    """Read a CSV whose rows may differ in length.

    Blank lines stay in place as all-NaN rows, so every line is a segment.
    """
    text = _read_text(file)
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        raise DataLoadError(f"{_file_name(file)} is empty")

    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        skip_blank_lines=False,
        nrows=nrows,
    )


def _read_table(file: Any, nrows: Optional[int] = None) -> pd.DataFrame:
    """Read a CSV or XLSX file without treating any row as a header."""
    name = _file_name(file)

    if hasattr(file, 'seek'):
        file.seek(0)

    try:
        if name.endswith('.xlsx') or name.endswith('.xls'):
            df = pd.read_excel(file, header=None, dtype=object, nrows=nrows)
        else:
            df = _read_csv(file, nrows=nrows)
    except DataLoadError:
        raise
    except (OSError, ValueError, csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataLoadError(f"Could not read {name}: {e}") from e
    finally:
        if hasattr(file, 'seek'):
            file.seek(0)

    return df


def default_rater_names(files: Sequence[Any]) -> List[str]:
    """File stems, unless two stems collide.

    Colliding stems fall back to the full path, and paths that still collide
    fall back to "Rater i".
    """
    stems = [Path(_file_name(f)).stem for f in files]
    names = [
        stem if stems.count(stem) == 1 else _file_path(f)
        for f, stem in zip(files, stems)
    ]
    return [
        name if names.count(name) == 1 else f"Rater {i + 1}"
        for i, name in enumerate(names)
    ]


def detect_header_row(row: Sequence[Any]) -> bool:
    """A row is a header when its first cell is text containing a letter."""
    if len(row) == 0:
        return False
    first = row[0]
    return isinstance(first, str) and bool(_LETTER.search(first))


def presence_to_code_sets(matrix: np.ndarray) -> List[CodeSet]:
    """Convert a (segments x codes) presence matrix to one code set per segment.

    Only cells equal to 1 mark a code present; anything else, including NaN,
    counts as absent.
    """
    matrix = np.asarray(matrix, dtype=float)
    return [frozenset(int(i) for i in np.flatnonzero(row == 1)) for row in matrix]


def load_rater_file(file: Any) -> Tuple[List[CodeSet], Optional[List[str]]]:
    """Load one rater's code-presence table.

    Args:
        file: Path or file object (CSV or XLSX), one column per code and one
            row per segment

    Returns:
        Tuple of (code set per segment, code labels from the header row or None)
    """
    df = _read_table(file)

    is_header = np.array([detect_header_row(row) for row in df.itertuples(index=False)], dtype=bool)

    labels = None
    if is_header.any():
        header = df[is_header].iloc[0]
        labels = [
            f"c{i + 1}" if pd.isna(v) or not str(v).strip() else str(v).strip()
            for i, v in enumerate(header.tolist())
        ]

    body = df[~is_header]
    if body.empty:
        raise DataLoadError(f"{_file_name(file)} contains no segment rows")

    numeric = body.apply(pd.to_numeric, errors='coerce')
    code_sets = presence_to_code_sets(numeric.to_numpy())

    logger.debug(
        "Loaded %s: %d segments, %d code columns, header=%s",
        _file_name(file), len(code_sets), df.shape[1], labels is not None,
    )

    return code_sets, labels


def transform_to_rater_data(
    files: Union[Dict[str, Any], List[Any]],
    config: Optional[AnalysisConfig] = None,
) -> RaterData:
    """Main entry point for turning rater files into RaterData.

    Args:
        files: Dict mapping rater name to file, or a list of files (rater
            names then default to the file stems, made unique when two
            stems collide)
        config: AnalysisConfig; its code_labels and rater_names override what
            the files supply

    Returns:
        RaterData instance
    """
    config = config or AnalysisConfig()

    if isinstance(files, dict):
        named = list(files.items())
    else:
        named = list(zip(default_rater_names(files), files))

    raters = []
    code_labels = None
    labels_from = None
    for name, file in named:
        code_sets, labels = load_rater_file(file)
        raters.append(tuple(code_sets))
        if labels is None:
            continue
        # The first header row found supplies the labels
        if code_labels is None:
            code_labels, labels_from = labels, name
        elif labels != code_labels:
            logger.warning(
                "Header of %s (%s) differs from %s (%s); using the labels from %s",
                name, ", ".join(labels), labels_from, ", ".join(code_labels), labels_from,
            )

    if config.code_labels:
        code_labels = list(config.code_labels)

    rater_names = list(config.rater_names) if config.rater_names else [name for name, _ in named]

    return RaterData(
        raters=tuple(raters),
        rater_names=tuple(rater_names),
        code_labels=tuple(code_labels) if code_labels is not None else None,
    )


def preview_dataframe(file: Any, n_rows: int = 10) -> Tuple[pd.DataFrame, List[str]]:
    """Load and preview a rater file.

    Args:
        file: File object
        n_rows: Number of rows to preview

    Returns:
        Tuple of (preview DataFrame, list of column labels)
    """
    df = _read_table(file, nrows=n_rows)

    if len(df) > 0 and detect_header_row(df.iloc[0].tolist()):
        columns = [str(v) for v in df.iloc[0].tolist()]
        df = df.iloc[1:].reset_index(drop=True)
        df.columns = columns
    else:
        df.columns = [f"c{i + 1}" for i in range(df.shape[1])]

    return df, df.columns.tolist()
