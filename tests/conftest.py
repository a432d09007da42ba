import numpy as np
import pytest

from ovrsvm import Dataset


class FixedClassifier:
    """Binary classifier with a constant margin and decision."""

    def __init__(self, margin, decision=1):
        self.margin = margin
        self.decision = decision

    def margin_score(self, vector):
        return self.margin

    def decide(self, vector):
        return self.decision


class CentroidClassifier:
    """Linear rule through the midpoint of the +1 and -1 centroids."""

    def __init__(self, w, b):
        self.w = w
        self.b = b

    def margin_score(self, vector):
        return float(np.dot(vector, self.w) + self.b)

    def decide(self, vector):
        return 1 if self.margin_score(vector) >= 0 else -1


def _centroid_trainer(features, labels, params):
    features = np.asarray(features)
    pos = features[labels == 1].mean(axis=0)
    neg = features[labels == -1].mean(axis=0)
    w = pos - neg
    return CentroidClassifier(w, -float(np.dot(w, (pos + neg) / 2.0)))


@pytest.fixture
def fixed():
    return FixedClassifier


@pytest.fixture
def centroid_trainer():
    return _centroid_trainer


@pytest.fixture
def xy_dataset():
    """Two features; label A when x > 0, B when x < 0."""
    records = [
        {"x": "1", "y": "0.5", "label": "A"},
        {"x": "-1", "y": "0.5", "label": "B"},
        {"x": "2", "y": "-1", "label": "A"},
        {"x": "-2", "y": "-1", "label": "B"},
        {"x": "3", "y": "1.5", "label": "A"},
        {"x": "-3", "y": "1.5", "label": "B"},
        {"x": "1.5", "y": "-0.5", "label": "A"},
        {"x": "-1.5", "y": "-0.5", "label": "B"},
    ]
    return Dataset.from_records(["x", "y", "label"], records)
