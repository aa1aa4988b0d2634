# caches.py
"""
Memoized tables used by the Bezier evaluator and the arc-length integrator.

- CoefficientCache: degree n -> binomial coefficients C(n,0..n)
- QuadratureCache: (order, lower, upper) -> Gauss-Legendre nodes and weights
- MotionContext: owns one of each; a process-wide default lives for the
  lifetime of the interpreter, tests may build their own or reset it.

Entries are added, never removed or modified. Inserts are lock-protected;
a concurrent miss may compute the same entry twice, the first insert wins.
"""

import logging
import threading
from dataclasses import dataclass, field

import numpy as np
from numpy.polynomial.legendre import leggauss
from scipy.special import comb

logger = logging.getLogger(__name__)


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.flags.writeable = False
    return arr


class CoefficientCache:
    """Binomial coefficients per Bezier degree."""

    def __init__(self):
        self._table = {}
        self._lock = threading.Lock()

    def coefficients(self, n: int) -> tuple:
        """Return (C(n,0), ..., C(n,n)). n=0 yields (1,)."""
        n = int(n)
        cached = self._table.get(n)
        if cached is not None:
            return cached
        row = tuple(int(comb(n, k, exact=True)) for k in range(n + 1))
        with self._lock:
            return self._table.setdefault(n, row)

    def __len__(self):
        return len(self._table)

    def __contains__(self, n):
        return n in self._table


class QuadratureCache:
    """Gauss-Legendre nodes/weights keyed by the exact (order, lower, upper) triple."""

    def __init__(self):
        self._table = {}
        self._lock = threading.Lock()

    def quadrature(self, order: int, lower: float = 0.0, upper: float = 1.0):
        """
        Nodes and weights for integrating over [lower, upper].

        Returns:
            (nodes, weights): read-only arrays of length `order`
        """
        key = (int(order), float(lower), float(upper))
        cached = self._table.get(key)
        if cached is not None:
            return cached
        if key[0] < 1:
            raise ValueError("quadrature order must be >= 1")
        x, w = leggauss(key[0])
        half = 0.5 * (key[2] - key[1])
        mid = 0.5 * (key[2] + key[1])
        entry = (_frozen(half * x + mid), _frozen(half * w))
        with self._lock:
            if key not in self._table:
                logger.debug("cached Gauss-Legendre table order=%d bounds=[%g, %g]", *key)
            return self._table.setdefault(key, entry)

    def __len__(self):
        return len(self._table)

    def __contains__(self, key):
        return key in self._table


@dataclass
class MotionContext:
    """Owner of the shared coefficient and quadrature caches."""

    coefficient_cache: CoefficientCache = field(default_factory=CoefficientCache)
    quadrature_cache: QuadratureCache = field(default_factory=QuadratureCache)

    def coefficients(self, n: int) -> tuple:
        return self.coefficient_cache.coefficients(n)

    def quadrature(self, order: int, lower: float = 0.0, upper: float = 1.0):
        return self.quadrature_cache.quadrature(order, lower, upper)


_default_context = MotionContext()
_default_lock = threading.Lock()


def default_context() -> MotionContext:
    """The process-wide context used when a curve is built without one."""
    return _default_context


def reset_default_context() -> MotionContext:
    """Replace the process-wide context with empty caches and return it."""
    global _default_context
    with _default_lock:
        _default_context = MotionContext()
    return _default_context
