"""
Playground session: load -> configure -> train -> predict.

The session is a finite state machine over immutable states:

    Empty --load--> Loaded --train--> Trained
                      ^  |               |
                      |  +--train------> Error (keeps the loaded configuration)
                      +--select_label / toggle_feature (drops any model)

Transitions are pure functions returning a new state. :class:`Session` holds
the current state and swaps it under a lock, so a trained model, its accuracy
and its status always become visible together.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple, Union

from .binary import BinaryTrainer, train_svc
from .decision import evaluate_accuracy, predict_input
from .errors import (
    EmptyDataset,
    InvalidHyperparameter,
    LabelColumnIsFeature,
    MissingLabelColumn,
    ModelNotTrained,
    OvrSvmError,
    TrainingCancelled,
    UnknownFeatureColumn,
)
from .features import Dataset, extract_features
from .ingest import default_columns
from .kernels import KernelKind, positive_int, resolve_kernel
from .ovr import MulticlassModel, train_model

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class TrainingConfig:
    """
    User-tunable training settings.

    Attributes
    ----------
    kernel:
        Kernel family. Default is RBF.
    cost:
        Soft-margin penalty ``C`` (> 0). Default is 1.
    gamma:
        RBF gamma; ``None`` means ``1 / number of features``.
    max_workers:
        Labels trained concurrently (``None``: up to the CPU count).
    """
    kernel: KernelKind = KernelKind.RBF
    cost: float = 1.0
    gamma: Optional[float] = None
    max_workers: Optional[int] = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "kernel", KernelKind(self.kernel))
        if not isinstance(self.cost, (int, float)) or not math.isfinite(self.cost) or self.cost <= 0:
            raise InvalidHyperparameter("cost", self.cost)
        if self.max_workers is not None:
            object.__setattr__(self, "max_workers", positive_int("max_workers", self.max_workers))


# =============================================================================
# States
# =============================================================================

@dataclass(frozen=True)
class Empty:
    status = "Ready for dataset"


@dataclass(frozen=True)
class Loaded:
    dataset: Dataset
    label_column: str
    feature_columns: Tuple[str, ...]
    status = "Dataset loaded"


@dataclass(frozen=True)
class Trained:
    loaded: Loaded
    config: TrainingConfig
    model: MulticlassModel
    accuracy: float
    status = "Model trained"


@dataclass(frozen=True)
class Error:
    loaded: Optional[Loaded]
    error: OvrSvmError
    status = "Training failed"


SessionState = Union[Empty, Loaded, Trained, Error]


def _loaded(state: SessionState) -> Loaded:
    if isinstance(state, Loaded):
        return state
    if isinstance(state, (Trained, Error)) and state.loaded is not None:
        return state.loaded
    raise EmptyDataset()


# =============================================================================
# Transitions
# =============================================================================

def load(state: SessionState, dataset: Dataset) -> Loaded:
    """Replace everything with a fresh dataset; last column is the label."""
    features, label = default_columns(dataset)
    return Loaded(dataset=dataset, label_column=label, feature_columns=tuple(features))


def select_label(state: SessionState, column: str) -> Loaded:
    """Use ``column`` as the label and every other column as a feature."""
    current = _loaded(state)
    if column not in current.dataset.columns:
        raise MissingLabelColumn(column)
    features = tuple(c for c in current.dataset.columns if c != column)
    return replace(current, label_column=column, feature_columns=features)


def toggle_feature(state: SessionState, column: str) -> Loaded:
    """Include or exclude one feature column, keeping dataset column order."""
    current = _loaded(state)
    if column not in current.dataset.columns:
        raise UnknownFeatureColumn(column)
    if column == current.label_column:
        raise LabelColumnIsFeature(column)

    selected = set(current.feature_columns)
    selected ^= {column}
    features = tuple(c for c in current.dataset.columns if c in selected)
    return replace(current, feature_columns=features)


def train(
    state: SessionState,
    config: TrainingConfig,
    *,
    trainer: BinaryTrainer = train_svc,
    cancel_event: Optional[threading.Event] = None,
    progress: bool = False,
) -> Union[Trained, Error]:
    """
    Train on the loaded configuration.

    Returns a :class:`Trained` state holding the model and its training
    accuracy, or an :class:`Error` state holding the failure. Cancellation is
    not a state: :class:`TrainingCancelled` propagates and the caller keeps
    its previous state.
    """
    current = _loaded(state)
    try:
        matrix, labels = extract_features(current.dataset, current.feature_columns, current.label_column)
        kernel = resolve_kernel(config.kernel, config.gamma, matrix.shape[1])
        model = train_model(
            matrix,
            labels,
            kernel,
            config.cost,
            trainer=trainer,
            feature_columns=current.feature_columns,
            max_workers=config.max_workers,
            cancel_event=cancel_event,
            progress=progress,
        )
        accuracy = evaluate_accuracy(matrix, labels, model)
    except TrainingCancelled:
        raise
    except OvrSvmError as exc:
        logger.warning("Training failed: %s", exc)
        return Error(loaded=current, error=exc)

    logger.info("Model trained, training accuracy %.4f", accuracy)
    return Trained(loaded=current, config=config, model=model, accuracy=accuracy)


def predict(state: SessionState, values: Mapping[str, str]) -> str:
    """Classify a raw ``{feature column: value}`` mapping with the trained model."""
    if not isinstance(state, Trained):
        raise ModelNotTrained()
    return predict_input(state.model, values)


# =============================================================================
# Session holder
# =============================================================================

class Session:
    """
    Thread-safe holder of the current :data:`SessionState`.

    Training runs on a background executor. Its result is published only if
    no load, reconfiguration, cancellation, or newer training happened in
    the meantime; otherwise the run is discarded.

    Parameters
    ----------
    trainer:
        Binary training capability used by every run.
    executor:
        Executor for training runs. A single-thread executor is created if omitted.
    """

    def __init__(self, *, trainer: BinaryTrainer = train_svc, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self._trainer = trainer
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="training")
        self._lock = threading.Lock()
        self._state: SessionState = Empty()
        self._generation = 0
        self._cancel: Optional[threading.Event] = None

    @property
    def state(self) -> SessionState:
        return self._state

    def _apply(self, transition, *args) -> SessionState:
        with self._lock:
            new_state = transition(self._state, *args)
            self._supersede()
            self._state = new_state
            return new_state

    def _supersede(self) -> None:
        # Caller holds the lock.
        self._generation += 1
        if self._cancel is not None:
            self._cancel.set()
            self._cancel = None

    def load(self, dataset: Dataset) -> SessionState:
        return self._apply(load, dataset)

    def select_label(self, column: str) -> SessionState:
        return self._apply(select_label, column)

    def toggle_feature(self, column: str) -> SessionState:
        return self._apply(toggle_feature, column)

    def submit_training(self, config: TrainingConfig, *, progress: bool = False) -> "Future[SessionState]":
        """
        Start training in the background.

        Returns
        -------
        Future
            Resolves to the published :class:`Trained` or :class:`Error`
            state, or raises :class:`TrainingCancelled` if the run was
            cancelled or superseded.
        """
        with self._lock:
            snapshot = self._state
            _loaded(snapshot)
            self._supersede()
            generation = self._generation
            cancel = threading.Event()
            self._cancel = cancel

        def job() -> SessionState:
            new_state = train(snapshot, config, trainer=self._trainer, cancel_event=cancel, progress=progress)
            with self._lock:
                if cancel.is_set() or generation != self._generation:
                    logger.info("Discarding superseded training run")
                    raise TrainingCancelled()
                self._state = new_state
                self._cancel = None
            return new_state

        return self._executor.submit(job)

    def cancel(self) -> None:
        """Cancel the in-flight training run, if any. The current state is kept."""
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()
                self._cancel = None

    def predict(self, values: Mapping[str, str]) -> str:
        return predict(self._state, values)

    def close(self) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
