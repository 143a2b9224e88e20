"""Curve inheritance from a host's prototype."""

from __future__ import annotations

from typing import Optional

from reliasim.logging import get_logger
from reliasim.model.curve import FloatCurve
from reliasim.model.host import Host
from reliasim.model.scope import QueryEvaluator
from reliasim.types import CurveSource

_logger = get_logger(__name__)


def load_curve_from_prototype(
    host: Host, evaluator: QueryEvaluator
) -> Optional[FloatCurve]:
    """Return the prototype curve that applies to ``host``, if any.

    Prototype modules are scanned in declared order. The first module whose
    scope applies to ``host`` (the instance, not the prototype) and whose
    curve spans a positive domain wins; its curve object is returned as is,
    so the caller shares it with the prototype and every other borrower.

    Args:
        host: Instance whose prototype is scanned.
        evaluator: Predicate evaluator for module scopes.

    Returns:
        The shared curve, or None when no prototype module qualifies.
    """
    prototype = host.prototype
    if prototype is None or not prototype.modules:
        return None

    for candidate in prototype.modules:
        if not isinstance(candidate, CurveSource):
            continue
        if not candidate.scope.applies_to(host, evaluator):
            continue
        _logger.debug(
            "%s: prototype module [%s] matches",
            host.full_name,
            candidate.scope.configuration,
        )
        curve = candidate.get_reliability_curve()
        if curve is not None and curve.max_time > 0:
            _logger.debug(
                "%s: adopting prototype curve spanning %.2f to %.2f",
                host.full_name,
                curve.min_time,
                curve.max_time,
            )
            return curve
    return None
