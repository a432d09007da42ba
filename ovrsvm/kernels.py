"""
Kernel configuration.

A kernel is selected by a closed :class:`KernelKind` and resolved into an
immutable :class:`KernelSpec` holding the exact numbers the binary solver
consumes.

RBF parameterization
--------------------
Users think in terms of ``gamma`` (``exp(-gamma * ||x - y||^2)``) while the
solver contract is expressed with ``sigma`` (``exp(-||x - y||^2 / (2 sigma^2))``).
The resolver performs the translation:

    effective_gamma = gamma                 if gamma is finite and > 0
                    = 1 / max(1, D)         otherwise
    sigma           = sqrt(1 / (2 * effective_gamma))

Polynomial and sigmoid kernels use fixed coefficients.
"""

from __future__ import annotations

import enum
import logging
import math
import operator
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidHyperparameter

logger = logging.getLogger(__name__)


class KernelKind(str, enum.Enum):
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    RBF = "rbf"
    SIGMOID = "sigmoid"


# =============================================================================
# Resolved kernels
# =============================================================================

@dataclass(frozen=True)
class LinearKernel:
    kind = KernelKind.LINEAR


@dataclass(frozen=True)
class PolynomialKernel:
    """``(multiplier * <x, y> + constant) ** degree``."""
    degree: int = 3
    constant: float = 1.0
    multiplier: float = 1.0
    kind = KernelKind.POLYNOMIAL


@dataclass(frozen=True)
class RbfKernel:
    """``exp(-||x - y||^2 / (2 * sigma^2))``."""
    sigma: float
    kind = KernelKind.RBF

    @property
    def gamma(self) -> float:
        return 1.0 / (2.0 * self.sigma ** 2)


@dataclass(frozen=True)
class SigmoidKernel:
    """``tanh(multiplier * <x, y> + constant)``."""
    constant: float = 1.0
    multiplier: float = 1.0
    kind = KernelKind.SIGMOID


KernelSpec = Union[LinearKernel, PolynomialKernel, RbfKernel, SigmoidKernel]


# =============================================================================
# Resolver
# =============================================================================

def positive_int(field: str, value: object) -> int:
    """Return ``value`` as an ``int`` if it is an integer >= 1 (numpy integers included, bools excluded)."""
    if isinstance(value, bool):
        raise InvalidHyperparameter(field, value)
    try:
        number = operator.index(value)
    except TypeError:
        raise InvalidHyperparameter(field, value) from None
    if number < 1:
        raise InvalidHyperparameter(field, value)
    return number


def default_gamma(dimension: int) -> float:
    return 1.0 / max(1, dimension)


def resolve_kernel(
    kind: KernelKind,
    gamma: Optional[float] = None,
    dimension: int = 1,
    *,
    strict: bool = False,
) -> KernelSpec:
    """
    Resolve a kernel selection into a :data:`KernelSpec`.

    Parameters
    ----------
    kind:
        Kernel family.
    gamma:
        Optional user gamma, only used by the RBF kernel. ``None`` selects
        the default ``1 / max(1, dimension)``.
    dimension:
        Number of feature columns (positive integer).
    strict:
        If True, a non-numeric, non-positive or non-finite ``gamma`` raises
        :class:`InvalidHyperparameter`. Otherwise it falls back to the
        default gamma.

    Returns
    -------
    KernelSpec
        Immutable kernel configuration.

    Raises
    ------
    InvalidHyperparameter
        ``"dimension"`` if ``dimension`` is not a positive integer,
        ``"gamma"`` for a bad gamma when ``strict`` is set.
    """
    dimension = positive_int("dimension", dimension)

    kind = KernelKind(kind)

    if kind is KernelKind.LINEAR:
        return LinearKernel()

    if kind is KernelKind.POLYNOMIAL:
        return PolynomialKernel(degree=3, constant=1.0, multiplier=1.0)

    if kind is KernelKind.SIGMOID:
        return SigmoidKernel(constant=1.0, multiplier=1.0)

    if kind is KernelKind.RBF:
        effective = _effective_gamma(gamma, dimension, strict)
        return RbfKernel(sigma=math.sqrt(1.0 / (2.0 * effective)))

    raise ValueError(f"Unsupported kernel kind: {kind!r}")


def _effective_gamma(gamma: Optional[float], dimension: int, strict: bool) -> float:
    if gamma is None:
        return default_gamma(dimension)

    try:
        value = float(gamma)
    except (TypeError, ValueError):
        value = math.nan
    if math.isfinite(value) and value > 0:
        return value

    if strict:
        raise InvalidHyperparameter("gamma", gamma)

    fallback = default_gamma(dimension)
    logger.warning("Ignoring invalid gamma %r, using default %.6g", gamma, fallback)
    return fallback
