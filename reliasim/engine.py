"""Per-tick failure decision.

Survival is modelled with a constant hazard integrated from the origin:

    S(t) = exp(-f * t)

where ``f`` is the current failure rate (the base rate, or the worst momentary
rate when that is higher). Between two accepted checks at ``t0`` and ``t1``
the chance of surviving the increment, given survival up to ``t0``, is
``S(t1) / S(t0)``. A uniform roll above that ratio signals a failure.

This is a simplification: the rate in effect during each earlier interval is
not integrated separately, so a rate change rescales the whole history. The
chance of failure still rises steadily as operating time approaches the
current MTBF.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from reliasim.config import RELIABILITY_CONFIG, ReliabilityConfig
from reliasim.logging import get_logger
from reliasim.model.state import MomentaryFailureRate, ReliabilityState

if TYPE_CHECKING:
    from reliasim.types import Core

_logger = get_logger(__name__)


@dataclass(frozen=True)
class TickResult:
    """Record of one accepted reliability check."""

    operating_time: float
    base_failure_rate: float
    current_failure_rate: float
    reliability: float
    survival_chance: float
    failure_roll: float
    failed: bool


def select_failure_rate(base_failure_rate: float, momentary: MomentaryFailureRate) -> float:
    """Return the momentary rate when valid and higher than the base rate."""
    if momentary.valid and momentary.failure_rate > base_failure_rate:
        return momentary.failure_rate
    return base_failure_rate


def survival_probability(failure_rate: float, operating_time: float) -> float:
    """S(t) = exp(-f * t)."""
    return math.exp(-failure_rate * operating_time)


class ReliabilityEngine:
    """Stateful per-tick evaluator bound to one module's `ReliabilityState`.

    Args:
        state: Persisted scalars; the engine is their only writer.
        config: Check interval and reset sentinel.
        log: Logger or adapter for per-tick messages.
    """

    def __init__(
        self,
        state: ReliabilityState,
        config: ReliabilityConfig = RELIABILITY_CONFIG,
        log: Any = None,
    ) -> None:
        self.state = state
        self.config = config
        self.log = log if log is not None else _logger

    def update(self, core: Optional["Core"], enabled: bool) -> Optional[TickResult]:
        """Run one tick.

        Args:
            core: Core supplying operating data, random draws and the failure sink.
            enabled: Whether the owning module currently applies.

        Returns:
            A `TickResult` when a check was performed, otherwise None.
        """
        if not enabled or core is None:
            return None

        state = self.state
        operating_time = core.get_operating_time()
        if operating_time == self.config.operating_time_reset:
            # last_reliability is kept: the next session's first ratio is
            # taken against the previous session's value.
            state.last_check = 0.0
            return None

        if not self.config.is_check_due(operating_time, state.last_check):
            return None

        state.last_check = operating_time
        base_failure_rate = core.get_base_failure_rate()
        momentary = core.get_worst_momentary_failure_rate()
        # Hermite overshoot can push a curve below zero
        current_failure_rate = max(select_failure_rate(base_failure_rate, momentary), 0.0)

        # Floored so exp underflow keeps last_reliability within (0, 1]
        reliability = max(
            survival_probability(current_failure_rate, operating_time), sys.float_info.min
        )
        survival_chance = reliability / state.last_reliability
        state.last_reliability = reliability

        failure_roll = core.random.random()
        self.log.debug(
            "Survival chance at time %.2f is %.4f. Rolled %.4f",
            operating_time,
            survival_chance,
            failure_roll,
        )

        failed = failure_roll > survival_chance
        if failed:
            self.log.info(
                "Failed after %.1f seconds of operation with roll of %.4f",
                operating_time,
                failure_roll,
            )
            core.trigger_failure()

        return TickResult(
            operating_time=operating_time,
            base_failure_rate=base_failure_rate,
            current_failure_rate=current_failure_rate,
            reliability=reliability,
            survival_chance=survival_chance,
            failure_roll=failure_roll,
            failed=failed,
        )
