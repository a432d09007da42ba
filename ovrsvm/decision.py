"""
Multiclass decision rule and training-set accuracy.

Decision rule
-------------
For a vector ``x`` and each ``(label, classifier)`` of the model, in model
order:

    score = classifier.margin_score(x)   if finite
          = classifier.decide(x)         otherwise (a +1 / -1 class code)

The label with the strictly greatest score wins. Because the scan keeps the
first maximum, equal scores resolve to the label that appears earliest in the
model (first-seen order in the training labels).

Mixed scales
------------
When only some classifiers fall back to ``decide``, their ``+1`` / ``-1``
codes are compared directly with the continuous margins of the others. A
fallback ``+1`` beats a margin of ``0.7`` and loses to a margin of ``1.3``.
This is the documented behavior; scores are not rescaled. Use
:func:`decision_scores` to see which path each classifier took.
"""

from __future__ import annotations

import math
from typing import List, Mapping, NamedTuple, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatch, EmptyDataset, NonNumericFeature, UnnamedFeatures
from .features import parse_prediction_input
from .ovr import MulticlassModel


class ScoredLabel(NamedTuple):
    """
    Score of one binary classifier for one vector.

    Attributes
    ----------
    label:
        Label the classifier answers for.
    score:
        Margin score, or the ``+1`` / ``-1`` decision if the margin was not finite.
    fallback:
        True if ``score`` is the ``decide`` class code.
    """
    label: str
    score: float
    fallback: bool


def _as_vector(model: MulticlassModel, vector: Sequence[float]) -> np.ndarray:
    x = np.asarray(vector, dtype=np.float64)
    if x.ndim != 1 or x.shape[0] != model.dimension:
        raise DimensionMismatch(model.dimension, int(x.size))
    if not np.isfinite(x).all():
        j = int(np.argwhere(~np.isfinite(x))[0][0])
        column = model.feature_columns[j] if model.feature_columns is not None else str(j)
        raise NonNumericFeature(column)
    return x


def _score(classifier, x: np.ndarray) -> Tuple[float, bool]:
    margin = float(classifier.margin_score(x))
    if math.isfinite(margin):
        return margin, False
    return float(classifier.decide(x)), True


def decision_scores(model: MulticlassModel, vector: Sequence[float]) -> List[ScoredLabel]:
    """Per-label scores for ``vector``, in model order."""
    x = _as_vector(model, vector)
    scored = []
    for label, classifier in model.members:
        score, fallback = _score(classifier, x)
        scored.append(ScoredLabel(label, score, fallback))
    return scored


def select_label(scores: Sequence[ScoredLabel]) -> str:
    """Label with the strictly greatest score; the earliest one wins ties."""
    best_label = ""
    best_score = -math.inf
    for label, score, _ in scores:
        if score > best_score:
            best_score = score
            best_label = label
    return best_label


def predict(model: MulticlassModel, vector: Sequence[float]) -> str:
    """
    Classify one feature vector.

    Parameters
    ----------
    model:
        Trained one-vs-rest model.
    vector:
        Numeric vector of length ``model.dimension``.

    Returns
    -------
    str
        Winning label.

    Raises
    ------
    DimensionMismatch
        If ``vector`` does not have the model's dimension.
    NonNumericFeature
        If ``vector`` holds a NaN or infinite value.
    """
    return select_label(decision_scores(model, vector))


def predict_input(model: MulticlassModel, values: Mapping[str, str]) -> str:
    """
    Classify a raw ``{feature column: value}`` mapping.

    The model must have been trained with ``feature_columns``; the mapping must
    cover exactly those columns.
    """
    if model.feature_columns is None:
        raise UnnamedFeatures()
    return predict(model, parse_prediction_input(model.feature_columns, values))


def predict_many(model: MulticlassModel, matrix: np.ndarray) -> List[str]:
    return [predict(model, row) for row in np.asarray(matrix, dtype=np.float64)]


def evaluate_accuracy(matrix: np.ndarray, labels: Sequence[str], model: MulticlassModel) -> float:
    """
    Fraction of rows whose predicted label equals the true label.

    Parameters
    ----------
    matrix:
        Feature matrix of shape ``(N, D)``, usually the training matrix.
    labels:
        ``N`` true labels.
    model:
        Trained model.

    Returns
    -------
    float
        Accuracy in ``[0, 1]``.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        raise EmptyDataset()
    if matrix.shape[0] != len(labels):
        raise DimensionMismatch(matrix.shape[0], len(labels))

    predictions = predict_many(model, matrix)
    correct = sum(1 for predicted, truth in zip(predictions, labels) if predicted == truth)
    return correct / len(predictions)
