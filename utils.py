"""
utils
==============

Small helpers shared by the playground scripts:
- logging configuration
- a training-set confusion matrix heatmap
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import confusion_matrix


PathLike = Union[str, Path]


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure basic logging for playground scripts.

    Parameters
    ----------
    level:
        Logging level (e.g., logging.INFO).
    """
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def plot_confusion_matrix(
    y_true: Sequence[str],
    y_pred: Sequence[str],
    labels: Sequence[str],
    *,
    out_path: PathLike = "images/confusion_matrix.png",
    title: str = "Training confusion matrix",
) -> Path:
    """
    Save a confusion matrix heatmap.

    Parameters
    ----------
    y_true:
        True labels.
    y_pred:
        Predicted labels.
    labels:
        Label order for rows and columns (model order).
    out_path:
        Where to save the figure.
    title:
        Title of the plot.

    Returns
    -------
    Path
        The written file.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    cm = confusion_matrix(list(y_true), list(y_pred), labels=list(labels))

    plt.figure(figsize=(1.5 * len(labels) + 3, 1.2 * len(labels) + 2))
    sns.heatmap(cm, annot=True, fmt="d", cmap="viridis",
                xticklabels=labels, yticklabels=labels)
    plt.xlabel("Predicted")
    plt.ylabel("True")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()
    return out_path
