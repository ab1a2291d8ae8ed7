"""Linear and logarithmic scales mapping occurrence counts to visual magnitudes."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Tuple

LOGGER = logging.getLogger(__name__)


class ScaleDomainError(ValueError):
    """Raised when a value lies outside what a scale can represent."""


class DegenerateDomainError(ScaleDomainError):
    """Raised when inverting a scale whose domain collapses to a single value."""


@dataclass(frozen=True)
class Scale:
    """Invertible mapping from a numeric domain onto a numeric range.

    ``forward``/``backward`` transform values into the space where the mapping
    is linear (identity for linear scales, natural log for logarithmic ones).
    Domain and range endpoints map onto each other exactly so that slider
    extremes always resolve to the true corpus extremes.
    """

    domain: Tuple[float, float]
    range: Tuple[float, float]
    kind: str
    _forward: Callable[[float], float]
    _backward: Callable[[float], float]

    @property
    def is_degenerate(self) -> bool:
        return self.domain[0] == self.domain[1]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if self.kind == "log" and value <= 0:
            raise ScaleDomainError(f"log scale cannot map non-positive value {value}")
        if self.is_degenerate:
            return r0
        if value == d0:
            return r0
        if value == d1:
            return r1
        t0 = self._forward(d0)
        t1 = self._forward(d1)
        ratio = (self._forward(value) - t0) / (t1 - t0)
        return r0 + ratio * (r1 - r0)

    def invert(self, value: float) -> float:
        """Map a range value back onto the domain.

        Raises:
            DegenerateDomainError: If the domain is a single value.
        """

        d0, d1 = self.domain
        r0, r1 = self.range
        if self.is_degenerate:
            raise DegenerateDomainError(f"cannot invert a scale over the single-value domain {d0}")
        if value == r0:
            return d0
        if value == r1:
            return d1
        t0 = self._forward(d0)
        t1 = self._forward(d1)
        ratio = (value - r0) / (r1 - r0)
        return self._backward(t0 + ratio * (t1 - t0))


def _identity(value: float) -> float:
    return value


def make_linear_scale(domain_min: float, domain_max: float, range_min: float, range_max: float) -> Scale:
    """Build a linear scale over ``[domain_min, domain_max]``.

    A single-value domain yields a constant scale returning ``range_min``; its
    ``invert`` raises :class:`DegenerateDomainError`.
    """

    if domain_min == domain_max:
        LOGGER.warning("Linear scale built on degenerate domain [%s, %s]", domain_min, domain_max)
    return Scale(
        domain=(float(domain_min), float(domain_max)),
        range=(float(range_min), float(range_max)),
        kind="linear",
        _forward=_identity,
        _backward=_identity,
    )


def make_log_scale(domain_min: float, domain_max: float, range_min: float, range_max: float) -> Scale:
    """Build a scale that is linear in natural-log space.

    Raises:
        ScaleDomainError: If either domain bound is not strictly positive.
    """

    if domain_min <= 0 or domain_max <= 0:
        raise ScaleDomainError(
            f"log scale domain must be strictly positive, got [{domain_min}, {domain_max}]"
        )
    if domain_min == domain_max:
        LOGGER.warning("Log scale built on degenerate domain [%s, %s]", domain_min, domain_max)
    return Scale(
        domain=(float(domain_min), float(domain_max)),
        range=(float(range_min), float(range_max)),
        kind="log",
        _forward=math.log,
        _backward=math.exp,
    )


def make_scale(
    domain_min: float,
    domain_max: float,
    range_min: float,
    range_max: float,
    *,
    logarithmic: bool,
) -> Scale:
    """Dispatch to the logarithmic or linear scale constructor."""

    if logarithmic:
        return make_log_scale(domain_min, domain_max, range_min, range_max)
    return make_linear_scale(domain_min, domain_max, range_min, range_max)
