"""
CSV ingestion into a :class:`~ovrsvm.features.Dataset`.

Conventions:
- the first line is the header and defines column order,
- every value is kept as the raw string (no type inference, no NA markers),
- rows whose cells are all empty are dropped,
- the last column is the default label, every other column a default feature.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Tuple, Union

import pandas as pd

from .errors import DatasetParseError, EmptyDataset
from .features import Dataset

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


SAMPLE_IRIS_CSV = """sepal_length,sepal_width,petal_length,petal_width,species
5.1,3.5,1.4,0.2,setosa
4.9,3.0,1.4,0.2,setosa
5.8,4.0,1.2,0.2,setosa
7.0,3.2,4.7,1.4,versicolor
6.4,3.2,4.5,1.5,versicolor
6.9,3.1,4.9,1.5,versicolor
6.3,3.3,6.0,2.5,virginica
5.8,2.7,5.1,1.9,virginica
7.1,3.0,5.9,2.1,virginica"""


def _frame_to_dataset(df: pd.DataFrame) -> Dataset:
    columns = [str(c) for c in df.columns]
    df = df.fillna("")
    df.columns = columns
    non_empty = (df != "").any(axis=1)
    dropped = int((~non_empty).sum())
    if dropped:
        logger.debug("Dropped %d empty rows", dropped)
    df = df[non_empty]

    if not columns or df.empty:
        raise EmptyDataset()

    rows = tuple(dict(zip(columns, values)) for values in df.itertuples(index=False, name=None))
    return Dataset(columns=tuple(columns), rows=rows)


def _read(source) -> pd.DataFrame:
    try:
        return pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            skipinitialspace=False,
        )
    except pd.errors.EmptyDataError as exc:
        raise EmptyDataset() from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DatasetParseError(str(exc)) from exc


def parse_csv_text(text: str) -> Dataset:
    """Parse CSV text (header line first) into a dataset."""
    return _frame_to_dataset(_read(io.StringIO(text)))


def read_dataset(path: PathLike) -> Dataset:
    """
    Read a CSV file into a dataset.

    Parameters
    ----------
    path:
        CSV file with a header line.

    Returns
    -------
    Dataset
        Raw string table with all-empty rows removed.

    Raises
    ------
    EmptyDataset
        If the file has no columns or no non-empty rows.
    DatasetParseError
        If the file is not valid CSV.
    """
    dataset = _frame_to_dataset(_read(Path(path)))
    logger.info("Loaded %s: %d rows, %d columns", path, len(dataset), len(dataset.columns))
    return dataset


def default_columns(dataset: Dataset) -> Tuple[List[str], str]:
    """Default ``(feature_columns, label_column)``: the last column is the label."""
    if not dataset.columns:
        raise EmptyDataset()
    label = dataset.columns[-1]
    return [c for c in dataset.columns if c != label], label
