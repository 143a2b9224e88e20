"""Interfaces for the collaborators reliability modules consume.

The engine never depends on a concrete core or registry; anything shaped like
these protocols can drive it. `reliasim.core` ships simulated implementations.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reliasim.model.curve import FloatCurve
    from reliasim.model.host import Host
    from reliasim.model.scope import ConfigurationScope
    from reliasim.model.state import MomentaryFailureRate
    from reliasim.mtbf import MTBFUnit


class Core(Protocol):
    """Per-host service supplying operating data and receiving failures."""

    random: random.Random

    def get_operating_time(self) -> float:
        """Accumulated operating time, or -1 when not accumulating."""
        ...

    def get_base_failure_rate(self) -> float:
        """Base failure rate aggregated across the host's reliability modules."""
        ...

    def get_worst_momentary_failure_rate(self) -> "MomentaryFailureRate": ...

    def trigger_failure(self) -> None: ...

    def failure_rate_to_mtbf_string(
        self, failure_rate: float, units: "MTBFUnit", maximum: int
    ) -> str: ...


class CoreResolver(Protocol):
    """Registry resolving the core attached to a host, if any yet."""

    def get_core(self, host: "Host") -> Optional[Core]: ...


@runtime_checkable
class CurveSource(Protocol):
    """A module that may carry a reliability curve under a configuration scope."""

    scope: "ConfigurationScope"

    def get_reliability_curve(self) -> Optional["FloatCurve"]: ...
