"""Simulated per-host core and the registry that resolves it.

`SimulatedCore` is the reference implementation of the `reliasim.types.Core`
protocol used by simulations and tests. It accumulates operating time while
its host runs, aggregates the base failure rate of the host's reliability
modules, tracks named momentary failure rates and records triggered failures.
What a failure does to the host is left to `on_failure` listeners.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from reliasim.config import RELIABILITY_CONFIG, ReliabilityConfig
from reliasim.logging import get_logger
from reliasim.model.host import Host
from reliasim.model.state import MomentaryFailureRate
from reliasim.mtbf import MTBFUnit, failure_rate_to_mtbf_string
from reliasim.reliability import ReliabilityModule

logger = get_logger(__name__)


@dataclass(frozen=True)
class FailureEvent:
    """A failure signalled to a core."""

    host: str
    mission_time: float
    operating_time: float
    flight_data: float


class SimulatedCore:
    """Operating data, shared random stream and failure sink for one host.

    Args:
        host: Host this core serves.
        rng: The host's random stream, shared by all of its modules.
        config: Shared tunables.
        flight_data: Flight data accumulated in earlier runs.
    """

    def __init__(
        self,
        host: Host,
        rng: Optional[random.Random] = None,
        config: ReliabilityConfig = RELIABILITY_CONFIG,
        flight_data: float = 0.0,
    ) -> None:
        self.host = host
        self.random = rng if rng is not None else random.Random()
        self.config = config
        self.flight_data = flight_data
        self.mission_time = 0.0
        self.failures: List[FailureEvent] = []
        self.on_failure: List[Callable[[FailureEvent], None]] = []
        self._operating_time = config.operating_time_reset
        self._momentary: Dict[str, float] = {}

    # -- operating time ------------------------------------------------------

    @property
    def operating(self) -> bool:
        return self._operating_time != self.config.operating_time_reset

    def start_operating(self) -> None:
        """Begin a new operating session at time zero. No-op while operating."""
        if not self.operating:
            logger.debug("%s: operating session started", self.host.full_name)
            self._operating_time = 0.0

    def stop_operating(self) -> None:
        if self.operating:
            logger.debug(
                "%s: operating session stopped at %.2f",
                self.host.full_name,
                self._operating_time,
            )
        self._operating_time = self.config.operating_time_reset

    def advance(self, dt: float) -> None:
        """Advance mission time, plus operating time and flight data when operating."""
        self.mission_time += dt
        if self.operating:
            self._operating_time += dt
            self.flight_data += dt

    def get_operating_time(self) -> float:
        return self._operating_time

    # -- failure rates ---------------------------------------------------------

    def get_base_failure_rate(self) -> float:
        """Sum of the host's enabled reliability modules at current flight data."""
        total = 0.0
        for module in self.host.modules or []:
            if isinstance(module, ReliabilityModule) and module.enabled:
                total += module.get_base_failure_rate(self.flight_data)
        return max(total, self.config.min_failure_rate)

    def set_momentary_failure_rate(self, name: str, failure_rate: float) -> None:
        self._momentary[name] = float(failure_rate)

    def clear_momentary_failure_rate(self, name: str) -> None:
        self._momentary.pop(name, None)

    def momentary_failure_rates(self) -> Dict[str, float]:
        return dict(self._momentary)

    def get_worst_momentary_failure_rate(self) -> MomentaryFailureRate:
        if not self._momentary:
            return MomentaryFailureRate(valid=False, failure_rate=0.0)
        return MomentaryFailureRate(valid=True, failure_rate=max(self._momentary.values()))

    # -- failures and display --------------------------------------------------

    def trigger_failure(self) -> None:
        event = FailureEvent(
            host=self.host.name,
            mission_time=self.mission_time,
            operating_time=self._operating_time,
            flight_data=self.flight_data,
        )
        self.failures.append(event)
        logger.info(
            "%s: failure after %.1f seconds of operation at T+%.2f",
            self.host.full_name,
            event.operating_time,
            event.mission_time,
        )
        for listener in list(self.on_failure):
            listener(event)

    def failure_rate_to_mtbf_string(
        self,
        failure_rate: float,
        units: MTBFUnit = MTBFUnit.SECONDS,
        maximum: int = 999,
        short_form: bool = False,
    ) -> str:
        return failure_rate_to_mtbf_string(failure_rate, units, maximum, short_form)


class CoreRegistry:
    """Resolves the core registered for a host instance."""

    def __init__(self) -> None:
        self._cores: Dict[Host, SimulatedCore] = {}

    def register(self, host: Host, core: SimulatedCore) -> None:
        self._cores[host] = core

    def unregister(self, host: Host) -> None:
        self._cores.pop(host, None)

    def get_core(self, host: Host) -> Optional[SimulatedCore]:
        return self._cores.get(host)

    def __len__(self) -> int:
        return len(self._cores)
