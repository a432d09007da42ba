"""
Binary classifier capability and its scikit-learn implementation.

The one-vs-rest core only needs three things from a binary solver:

- train it once on ``(features, labels in {+1, -1}, hyperparameters)``,
- read a signed margin score for a vector (may be non-finite),
- read a hard ``+1`` / ``-1`` decision for a vector.

:class:`BinaryClassifier` describes that capability and :data:`BinaryTrainer`
is the training entry point. :func:`train_svc` provides it on top of
``sklearn.svm.SVC`` (libsvm), translating a :data:`~ovrsvm.kernels.KernelSpec`
into SVC keyword arguments:

=============  =========================================================
Kernel         SVC arguments
=============  =========================================================
linear         ``kernel="linear"``
polynomial     ``kernel="poly", degree, gamma=multiplier, coef0=constant``
rbf            ``kernel="rbf", gamma=1 / (2 * sigma**2)``
sigmoid        ``kernel="sigmoid", gamma=multiplier, coef0=constant``
=============  =========================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, NamedTuple, Protocol

import numpy as np
from sklearn.svm import SVC

from .kernels import (
    KernelSpec,
    LinearKernel,
    PolynomialKernel,
    RbfKernel,
    SigmoidKernel,
)


# Fixed solver settings; not exposed to users so training time stays bounded.
TOLERANCE = 1e-4
MAX_PASSES = 10
MAX_ITERATIONS = 10000


class BinaryHyperparams(NamedTuple):
    """
    Settings handed to a binary trainer.

    Attributes
    ----------
    cost:
        Soft-margin penalty ``C`` (> 0).
    kernel:
        Resolved kernel, shared by every classifier of a model.
    tol:
        Solver tolerance.
    max_passes:
        Passes without alpha changes before an SMO-style solver stops.
        libsvm has no such knob; :func:`train_svc` ignores it.
    max_iterations:
        Hard cap on solver iterations.
    """
    cost: float
    kernel: KernelSpec
    tol: float = TOLERANCE
    max_passes: int = MAX_PASSES
    max_iterations: int = MAX_ITERATIONS


class BinaryClassifier(Protocol):
    def margin_score(self, vector: np.ndarray) -> float:
        ...

    def decide(self, vector: np.ndarray) -> int:
        ...


BinaryTrainer = Callable[[np.ndarray, np.ndarray, BinaryHyperparams], BinaryClassifier]


# =============================================================================
# scikit-learn backend
# =============================================================================

def svc_kernel_arguments(kernel: KernelSpec) -> Dict[str, Any]:
    if isinstance(kernel, LinearKernel):
        return {"kernel": "linear"}
    if isinstance(kernel, PolynomialKernel):
        return {
            "kernel": "poly",
            "degree": kernel.degree,
            "gamma": kernel.multiplier,
            "coef0": kernel.constant,
        }
    if isinstance(kernel, RbfKernel):
        return {"kernel": "rbf", "gamma": kernel.gamma}
    if isinstance(kernel, SigmoidKernel):
        return {"kernel": "sigmoid", "gamma": kernel.multiplier, "coef0": kernel.constant}
    raise ValueError(f"Unsupported kernel spec: {kernel!r}")


class SVCBinaryClassifier:
    """
    A fitted ``SVC`` answering for one ``+1`` / ``-1`` problem.

    Instances are created by :func:`train_svc` and never refitted.
    """

    __slots__ = ("_svc",)

    def __init__(self, svc: SVC) -> None:
        self._svc = svc

    def margin_score(self, vector: np.ndarray) -> float:
        x = np.asarray(vector, dtype=np.float64).reshape(1, -1)
        # classes_ is sorted, so positive decision values mean +1.
        return float(self._svc.decision_function(x)[0])

    def decide(self, vector: np.ndarray) -> int:
        x = np.asarray(vector, dtype=np.float64).reshape(1, -1)
        return 1 if int(self._svc.predict(x)[0]) > 0 else -1

    @property
    def n_support(self) -> int:
        return int(self._svc.n_support_.sum())


def train_svc(features: np.ndarray, labels: np.ndarray, params: BinaryHyperparams) -> SVCBinaryClassifier:
    """
    Fit one scikit-learn ``SVC`` on a binary problem.

    Parameters
    ----------
    features:
        Float matrix of shape ``(N, D)``.
    labels:
        Integer vector of ``+1`` / ``-1`` of shape ``(N,)``.
    params:
        Cost, kernel and solver limits.

    Returns
    -------
    SVCBinaryClassifier
        The trained classifier.
    """
    svc = SVC(
        C=params.cost,
        tol=params.tol,
        max_iter=params.max_iterations,
        **svc_kernel_arguments(params.kernel),
    )
    svc.fit(np.asarray(features, dtype=np.float64), np.asarray(labels, dtype=np.int64))
    return SVCBinaryClassifier(svc)
