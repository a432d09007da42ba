"""
Tabular data model and feature extraction.

A :class:`Dataset` is the raw, string-valued table produced by ingestion.
:func:`extract_features` turns a column selection of it into a float matrix
and a string label vector. Nothing is coerced silently: a cell that is not a
finite number fails the whole extraction with :class:`NonNumericFeature`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import (
    EmptyDataset,
    EmptyFeatureSet,
    LabelColumnIsFeature,
    MissingLabelColumn,
    NonNumericFeature,
    UnknownFeatureColumn,
)


Row = Mapping[str, str]


@dataclass(frozen=True)
class Dataset:
    """
    Ordered, read-only table of raw string values.

    Attributes
    ----------
    columns:
        Distinct column names in first-seen order.
    rows:
        One mapping per row, holding a value (possibly ``""``) for every column.
    """
    columns: Tuple[str, ...]
    rows: Tuple[Row, ...]

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names in {self.columns!r}.")
        for index, row in enumerate(self.rows):
            missing = [c for c in self.columns if c not in row]
            if missing:
                raise ValueError(f"Row {index} has no value for columns {missing!r}.")

    @classmethod
    def from_records(cls, columns: Sequence[str], records: Iterable[Mapping[str, object]]) -> "Dataset":
        """Build a dataset, filling absent cells with ``""`` and stringifying values."""
        columns = tuple(columns)
        rows = tuple(
            {c: "" if record.get(c) is None else str(record.get(c)) for c in columns}
            for record in records
        )
        return cls(columns=columns, rows=rows)

    def __len__(self) -> int:
        return len(self.rows)


def parse_feature_value(value: Optional[str]) -> float:
    """
    Parse a raw cell as a finite float.

    Raises
    ------
    ValueError
        If the value is missing, empty, not a number, NaN or infinite.
    """
    if value is None:
        raise ValueError("missing value")
    parsed = float(value)
    if not math.isfinite(parsed):
        raise ValueError(f"non-finite value {value!r}")
    return parsed


def extract_features(
    dataset: Dataset,
    feature_columns: Sequence[str],
    label_column: str,
) -> Tuple[np.ndarray, List[str]]:
    """
    Convert selected dataset columns into a feature matrix and label vector.

    Parameters
    ----------
    dataset:
        Source table.
    feature_columns:
        Ordered, non-empty list of feature column names.
    label_column:
        Column holding the class labels. Must not be a feature column.

    Returns
    -------
    (np.ndarray, list of str)
        Float64 matrix of shape ``(N, D)`` and the ``N`` labels, verbatim.

    Raises
    ------
    EmptyDataset, EmptyFeatureSet, MissingLabelColumn, LabelColumnIsFeature,
    UnknownFeatureColumn, NonNumericFeature
    """
    feature_columns = list(feature_columns)

    if not feature_columns:
        raise EmptyFeatureSet()
    if label_column not in dataset.columns:
        raise MissingLabelColumn(label_column)
    if label_column in feature_columns:
        raise LabelColumnIsFeature(label_column)
    for column in feature_columns:
        if column not in dataset.columns:
            raise UnknownFeatureColumn(column)
    if not dataset.rows:
        raise EmptyDataset()

    matrix = np.empty((len(dataset.rows), len(feature_columns)), dtype=np.float64)
    labels: List[str] = []

    for i, row in enumerate(dataset.rows):
        for j, column in enumerate(feature_columns):
            try:
                matrix[i, j] = parse_feature_value(row[column])
            except ValueError as exc:
                raise NonNumericFeature(column, i) from exc
        labels.append(str(row[label_column]))

    matrix.setflags(write=False)
    return matrix, labels


def parse_prediction_input(feature_columns: Sequence[str], values: Mapping[str, str]) -> np.ndarray:
    """
    Parse a ``{column: raw value}`` mapping into a vector ordered like ``feature_columns``.

    A missing or non-numeric value raises :class:`NonNumericFeature` with no
    row index; a key outside ``feature_columns`` raises
    :class:`UnknownFeatureColumn`.
    """
    for column in values:
        if column not in feature_columns:
            raise UnknownFeatureColumn(column)

    vector = np.empty(len(feature_columns), dtype=np.float64)
    for j, column in enumerate(feature_columns):
        try:
            vector[j] = parse_feature_value(values.get(column))
        except ValueError as exc:
            raise NonNumericFeature(column) from exc
    return vector
