"""
One-vs-rest decomposition.

An N-class problem becomes N binary problems, one per distinct label in
first-seen order: rows carrying the label are ``+1``, every other row is
``-1``. Each problem is handed to a :data:`~ovrsvm.binary.BinaryTrainer`.

Ordering
--------
The label order stored in :class:`MulticlassModel` is the order in which
labels first appear in the training label vector. The decision rule breaks
ties on that order, so it never depends on sorting, hashing, or on which
parallel task finishes first.

Atomicity
---------
A model is built only after every binary classifier trained successfully.
A failing label raises :class:`~ovrsvm.errors.TrainingFailed`; a cancelled
run raises :class:`~ovrsvm.errors.TrainingCancelled`. Neither leaves a
partial model behind.
"""

from __future__ import annotations

import logging
import math
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from .binary import BinaryClassifier, BinaryHyperparams, BinaryTrainer, train_svc
from .errors import (
    DimensionMismatch,
    EmptyDataset,
    EmptyFeatureSet,
    InsufficientLabels,
    InvalidHyperparameter,
    NonNumericFeature,
    TrainingCancelled,
    TrainingFailed,
)
from .kernels import KernelSpec, positive_int

logger = logging.getLogger(__name__)


# =============================================================================
# Model
# =============================================================================

@dataclass(frozen=True)
class MulticlassModel:
    """
    Trained one-vs-rest model.

    Attributes
    ----------
    members:
        ``(label, classifier)`` pairs in first-seen label order. Each
        classifier belongs to exactly one pair.
    kernel:
        Kernel every member was trained with.
    dimension:
        Feature vector length every member expects.
    feature_columns:
        Names of the feature columns, in vector order, when known.
    """
    members: Tuple[Tuple[str, BinaryClassifier], ...]
    kernel: KernelSpec
    dimension: int
    feature_columns: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise InsufficientLabels(len(self.members))
        if self.feature_columns is not None and len(self.feature_columns) != self.dimension:
            raise DimensionMismatch(self.dimension, len(self.feature_columns))

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(label for label, _ in self.members)

    def __len__(self) -> int:
        return len(self.members)


def distinct_labels(labels: Sequence[str]) -> List[str]:
    """Distinct labels in first-seen order."""
    return list(dict.fromkeys(labels))


def binary_targets(labels: Sequence[str], positive: str) -> np.ndarray:
    return np.array([1 if label == positive else -1 for label in labels], dtype=np.int64)


# =============================================================================
# Training
# =============================================================================

def train_model(
    matrix: np.ndarray,
    labels: Sequence[str],
    kernel: KernelSpec,
    cost: float,
    *,
    trainer: BinaryTrainer = train_svc,
    feature_columns: Optional[Sequence[str]] = None,
    max_workers: Optional[int] = 1,
    cancel_event: Optional[threading.Event] = None,
    progress: bool = False,
) -> MulticlassModel:
    """
    Train one binary classifier per distinct label.

    Parameters
    ----------
    matrix:
        Float feature matrix of shape ``(N, D)``.
    labels:
        ``N`` label strings aligned with ``matrix`` rows.
    kernel:
        Resolved kernel shared by every binary classifier.
    cost:
        Soft-margin penalty ``C``; must be finite and > 0.
    trainer:
        Binary training capability. Defaults to the scikit-learn ``SVC`` backend.
    feature_columns:
        Optional column names recorded on the model for :func:`~ovrsvm.decision.predict_input`.
    max_workers:
        Number of labels trained concurrently. ``1`` trains sequentially,
        ``None`` uses one worker per label up to the CPU count.
    cancel_event:
        When set, labels not yet started are skipped and the run raises
        :class:`TrainingCancelled`.
    progress:
        Show a tqdm progress bar over labels.

    Returns
    -------
    MulticlassModel

    Raises
    ------
    InvalidHyperparameter, EmptyDataset, EmptyFeatureSet, DimensionMismatch,
    InsufficientLabels
        Before any training work starts.
    TrainingFailed
        For the earliest label (in model order) whose training raised.
    TrainingCancelled
        If ``cancel_event`` was set before the run completed.
    """
    try:
        cost_value = float(cost)
    except (TypeError, ValueError):
        raise InvalidHyperparameter("cost", cost) from None
    if not math.isfinite(cost_value) or cost_value <= 0:
        raise InvalidHyperparameter("cost", cost)

    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        raise EmptyDataset()
    if matrix.shape[1] == 0:
        raise EmptyFeatureSet()
    if matrix.shape[0] != len(labels):
        raise DimensionMismatch(matrix.shape[0], len(labels))
    if feature_columns is not None and len(feature_columns) != matrix.shape[1]:
        raise DimensionMismatch(matrix.shape[1], len(feature_columns))
    if not np.isfinite(matrix).all():
        i, j = (int(k) for k in np.argwhere(~np.isfinite(matrix))[0])
        column = feature_columns[j] if feature_columns is not None else str(j)
        raise NonNumericFeature(column, i)

    classes = distinct_labels(labels)
    if len(classes) < 2:
        raise InsufficientLabels(len(classes))

    params = BinaryHyperparams(cost=cost_value, kernel=kernel)
    workers = _resolve_workers(max_workers, len(classes))
    logger.info(
        "Training one-vs-rest: %d labels, %d rows, dimension %d, kernel=%s, C=%g, workers=%d",
        len(classes), matrix.shape[0], matrix.shape[1], kernel.kind.value, params.cost, workers,
    )

    with tqdm(total=len(classes), desc="Training one-vs-rest", disable=not progress) as pbar:
        def run(label: str) -> BinaryClassifier:
            if cancel_event is not None and cancel_event.is_set():
                raise TrainingCancelled()
            classifier = trainer(matrix, binary_targets(labels, label), params)
            logger.debug("Trained binary classifier for label %r", label)
            pbar.update(1)
            return classifier

        if workers == 1:
            classifiers = [_train_one(run, label) for label in classes]
        else:
            classifiers = _train_parallel(run, classes, workers)

    if cancel_event is not None and cancel_event.is_set():
        raise TrainingCancelled()

    return MulticlassModel(
        members=tuple(zip(classes, classifiers)),
        kernel=kernel,
        dimension=int(matrix.shape[1]),
        feature_columns=tuple(feature_columns) if feature_columns is not None else None,
    )


def _resolve_workers(max_workers: Optional[int], n_labels: int) -> int:
    if max_workers is None:
        return max(1, min(os.cpu_count() or 1, n_labels))
    return min(positive_int("max_workers", max_workers), n_labels)


def _train_one(run, label: str) -> BinaryClassifier:
    try:
        return run(label)
    except TrainingCancelled:
        raise
    except Exception as exc:
        raise TrainingFailed(label, exc) from exc


def _train_parallel(run, classes: List[str], workers: int) -> List[BinaryClassifier]:
    # Results are read back in label order, never in completion order.
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ovr") as pool:
        futures: Dict[str, Future] = {label: pool.submit(_train_one, run, label) for label in classes}
        try:
            return [futures[label].result() for label in classes]
        except BaseException:
            for future in futures.values():
                future.cancel()
            raise
