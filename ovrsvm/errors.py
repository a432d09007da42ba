"""
Error types raised by ovrsvm.

Two families:
- ``ValidationError``: caller input is unusable (detected before any training).
- ``TrainingError``: the one-vs-rest run could not produce a model.

Every error keeps its fields as attributes so callers can react to them
without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class OvrSvmError(Exception):
    """Base class for all ovrsvm errors."""


# =============================================================================
# Validation
# =============================================================================

class ValidationError(OvrSvmError):
    """Caller-supplied data or configuration is invalid."""


class EmptyDataset(ValidationError):
    def __init__(self) -> None:
        super().__init__("Dataset has no rows.")


class EmptyFeatureSet(ValidationError):
    def __init__(self) -> None:
        super().__init__("Select at least one feature column.")


class MissingLabelColumn(ValidationError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Label column {column!r} is not in the dataset.")


class LabelColumnIsFeature(ValidationError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Column {column!r} cannot be both the label and a feature.")


class UnknownFeatureColumn(ValidationError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Unknown feature column {column!r}.")


class NonNumericFeature(ValidationError):
    """
    A feature cell could not be parsed as a finite number.

    Attributes
    ----------
    column:
        Feature column name.
    row_index:
        0-based row position in the dataset, or None for a single prediction input.
    """

    def __init__(self, column: str, row_index: Optional[int] = None) -> None:
        self.column = column
        self.row_index = row_index
        where = f" (row {row_index})" if row_index is not None else ""
        super().__init__(f"Column {column!r} contains a non-numeric value{where}.")


class InsufficientLabels(ValidationError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"At least two unique labels are required, got {count}.")


class InvalidHyperparameter(ValidationError):
    def __init__(self, field: str, value: object = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for {field!r}: {value!r}.")


class DimensionMismatch(ValidationError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a vector of dimension {expected}, got {actual}.")


class DatasetParseError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(f"CSV parsing error: {message}")


class ModelNotTrained(ValidationError):
    def __init__(self) -> None:
        super().__init__("Train a model before predicting.")


class UnnamedFeatures(ValidationError):
    """The model does not know its feature column names, so raw input cannot be mapped."""

    def __init__(self) -> None:
        super().__init__("Model was trained without feature column names.")


# =============================================================================
# Training
# =============================================================================

class TrainingError(OvrSvmError):
    """The one-vs-rest training run did not produce a model."""


class TrainingFailed(TrainingError):
    """
    Training the binary classifier for ``label`` raised.

    The original exception is available as ``cause`` (and ``__cause__``).
    """

    def __init__(self, label: str, cause: BaseException) -> None:
        self.label = label
        self.cause = cause
        super().__init__(f"Training failed for label {label!r}: {cause}")


class TrainingCancelled(TrainingError):
    def __init__(self) -> None:
        super().__init__("Training was cancelled.")
