"""
Record ingestion for the country graph clustering pipeline.

Reads a delimited statistical table (one row per country/area, year,
indicator, series and value) into typed `Record`s. Bad numeric cells are
tolerated and become `None`; a file that cannot be read at all raises
`IngestionFailure`.
"""

from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from graphcluster.errors import IngestionFailure
from graphcluster.logger import setup_logger, log_function_call
from graphcluster.records import Record


RECORD_COLUMNS = ['country_or_area', 'year', 'indicator', 'series', 'value']

logger = setup_logger('ingest')


def _normalise(column) -> str:
    return str(column).strip().lower().replace(' ', '_')


def select_record_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Pick the five record columns from the raw table.

    Uses the named columns when the header carries all of them, otherwise
    falls back to the first five columns in order.
    """
    if df.shape[1] < len(RECORD_COLUMNS):
        raise IngestionFailure(
            f"Expected at least {len(RECORD_COLUMNS)} columns, found {df.shape[1]}"
        )

    by_name = {_normalise(c): c for c in df.columns}
    if all(name in by_name for name in RECORD_COLUMNS):
        selected = df[[by_name[name] for name in RECORD_COLUMNS]].copy()
    else:
        logger.warning("Header does not name the record columns, using the first five columns")
        selected = df.iloc[:, :len(RECORD_COLUMNS)].copy()

    selected.columns = RECORD_COLUMNS
    return selected


def parse_numeric(column: pd.Series) -> pd.Series:
    """Coerce a text column to numbers; blanks, garbage and infinities become NaN."""
    cleaned = column.astype(str).str.strip().str.replace(',', '', regex=False)
    numeric = pd.to_numeric(cleaned, errors='coerce').astype(float)
    return numeric.where(np.isfinite(numeric))


def to_records(df: pd.DataFrame) -> List[Record]:
    table = select_record_columns(df)
    years = parse_numeric(table['year'])
    values = parse_numeric(table['value'])

    n_bad_values = int(values.isna().sum())
    if n_bad_values:
        logger.warning(f"{n_bad_values} rows have a missing or unparseable value")

    records = []
    for row, year, value in zip(table.itertuples(index=False), years, values):
        records.append(Record(
            entity=str(row.country_or_area).strip(),
            year=None if pd.isna(year) else int(year),
            indicator=str(row.indicator).strip(),
            series=str(row.series).strip(),
            value=None if pd.isna(value) else float(value),
        ))
    return records


@log_function_call(logger)
def load(path, delimiter=',') -> List[Record]:
    """
    Load the statistical table at `path` into a list of Records.

    Parameters:
    -----------
    path : str or Path
        Delimited text file with a header row.
    delimiter : str
        Field separator.

    Returns:
    --------
    records : list of Record
        One record per data row, in file order.
    """
    path = Path(path)
    try:
        df = pd.read_csv(path, sep=delimiter, dtype=str, keep_default_na=False)
    except FileNotFoundError as exc:
        raise IngestionFailure(f"Input file not found: {path}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as exc:
        raise IngestionFailure(f"Could not read {path}: {exc}") from exc

    records = to_records(df)
    logger.info(f"Loaded {len(records)} records from {path}")
    return records
