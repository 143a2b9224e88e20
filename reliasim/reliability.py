"""Host-attached reliability module.

`ReliabilityModule` determines its host's current reliability and reports
failures to the host's core. Lifecycle, in host terms:

- ``on_load(node)``: restore persisted state and an optional local curve.
- ``on_awake(scheduler, resolver)``: register the per-tick update and start
  the attachment task.
- attachment completes: core assigned, prototype curve adopted if needed.
- ``on_update()`` every tick: run the reliability engine.
- ``on_destroy()``: unregister everything.

Only one module per host should supply a non-zero base failure rate; extra
modules that exist to supply momentary rates must return 0 from
`get_base_failure_rate`, or the host's aggregated base rate is overstated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from reliasim.attachment import AttachmentTask, TickScheduler
from reliasim.config import RELIABILITY_CONFIG, ReliabilityConfig
from reliasim.engine import ReliabilityEngine, TickResult
from reliasim.logging import get_module_logger
from reliasim.model.curve import FloatCurve
from reliasim.model.loader import load_curve_from_prototype
from reliasim.model.scope import ConfigurationScope, QueryEvaluator
from reliasim.model.state import PersistedModuleState, ReliabilityState
from reliasim.mtbf import MTBFUnit, failure_rate_to_mtbf_string

if TYPE_CHECKING:
    from reliasim.model.host import Host
    from reliasim.types import Core, CoreResolver


class ReliabilityModule:
    """Reliability contributor attached to a `Host`.

    Args:
        evaluator: Predicate evaluator for the configuration scope.
        configuration: Scope string; empty means "the host's part name".
        curve: Locally defined curve. Without one, the curve is adopted from
            the host's prototype at startup.
        config: Shared tunables.
    """

    def __init__(
        self,
        evaluator: QueryEvaluator,
        configuration: str = "",
        curve: Optional[FloatCurve] = None,
        config: ReliabilityConfig = RELIABILITY_CONFIG,
    ) -> None:
        self.host: Optional["Host"] = None
        self.evaluator = evaluator
        self.config = config
        self.scope = ConfigurationScope(None, configuration)
        self.state = ReliabilityState()
        self.core: Optional["Core"] = None
        self.reliability_curve: Optional[FloatCurve] = curve
        self.attachment: Optional[AttachmentTask] = None
        self.last_result: Optional[TickResult] = None
        self.log = get_module_logger(__name__, self)
        self.engine = ReliabilityEngine(self.state, config, self.log)
        self._scheduler: Optional[TickScheduler] = None

    # -- host wiring ---------------------------------------------------------

    def attach_to(self, host: "Host") -> "ReliabilityModule":
        """Append this module to ``host`` and bind the scope to it."""
        self.host = host
        self.scope.host = host
        host.add_module(self)
        return self

    @property
    def configuration(self) -> str:
        return self.scope.configuration

    @configuration.setter
    def configuration(self, value: str) -> None:
        self.scope.configuration = value

    def log_prefix(self) -> str:
        host_name = self.host.full_name if self.host is not None else "<detached>"
        return f"Reliability({host_name}[{self.configuration}])"

    @property
    def enabled(self) -> bool:
        """True when a core is attached and the scope applies to the host."""
        if self.core is None or self.host is None:
            return False
        return self.scope.applies_to(self.host, self.evaluator)

    # -- queries ---------------------------------------------------------------

    def get_base_failure_rate(self, flight_data: float) -> float:
        """Failure rate of this module's curve at ``flight_data``.

        Falls back to the configured minimum rate when no curve is loaded.
        """
        if self.reliability_curve is None:
            self.log.debug("No reliability curve. Returning min failure rate.")
            return self.config.min_failure_rate
        rate = self.reliability_curve.evaluate(flight_data)
        self.log.debug("%.2f data evaluates to %.2e failure rate", flight_data, rate)
        return rate

    def get_reliability_curve(self) -> Optional[FloatCurve]:
        return self.reliability_curve

    def get_info(self) -> List[str]:
        """Display strings: header, current and maximum reliability as MTBF."""
        maximum = self.config.mtbf_display_maximum
        if self.reliability_curve is not None:
            max_rate = self.get_base_failure_rate(self.reliability_curve.max_time)
        else:
            max_rate = self.config.min_failure_rate

        if self.core is not None:
            current_rate = self.core.get_base_failure_rate()
            fmt = self.core.failure_rate_to_mtbf_string
        else:
            current_rate = max_rate
            fmt = failure_rate_to_mtbf_string

        return [
            "Base Reliability",
            f"Current Reliability: {fmt(current_rate, MTBFUnit.SECONDS, maximum)} MTBF",
            f"Maximum Reliability: {fmt(max_rate, MTBFUnit.SECONDS, maximum)} MTBF",
        ]

    # -- persistence -----------------------------------------------------------

    def on_load(self, node: Mapping[str, Any]) -> None:
        """Restore state from a persisted node.

        Raises:
            StateError: If the node is malformed.
        """
        record = PersistedModuleState.from_node(node)
        if "configuration" in node:
            self.configuration = record.configuration
        self.state.last_check = record.state.last_check
        self.state.last_reliability = record.state.last_reliability
        if record.curve is not None:
            self.reliability_curve = record.curve

    def on_save(self) -> Dict[str, Any]:
        """Persisted node for this module.

        Only a curve this module defined itself is written; an adopted
        prototype curve belongs to the prototype.
        """
        record = PersistedModuleState(
            configuration=self.scope.raw(),
            state=ReliabilityState(self.state.last_check, self.state.last_reliability),
            curve=self._own_curve(),
        )
        return record.to_node()

    def _own_curve(self) -> Optional[FloatCurve]:
        curve = self.reliability_curve
        if curve is None or self.host is None or self.host.prototype is None:
            return curve
        for candidate in self.host.prototype.modules or []:
            if getattr(candidate, "reliability_curve", None) is curve:
                return None
        return curve

    # -- lifecycle -------------------------------------------------------------

    def on_awake(self, scheduler: TickScheduler, resolver: "CoreResolver") -> None:
        self._scheduler = scheduler
        scheduler.add_update(self.on_update)
        self.attachment = AttachmentTask(
            get_host=lambda: self.host,
            resolver=resolver,
            on_started=self.startup,
            label=self.log_prefix(),
        )
        scheduler.start_task(self.attachment)

    def startup(self, core: "Core") -> None:
        self.log.debug("Startup")
        self.core = core
        if self.reliability_curve is None:
            self.load_data_from_prototype()
        self.log.debug("Startup::DONE")

    def load_data_from_prototype(self) -> None:
        if self.host is None:
            return
        self.log.debug("Loading data from prototype")
        curve = load_curve_from_prototype(self.host, self.evaluator)
        if curve is not None:
            self.reliability_curve = curve

    def on_update(self) -> None:
        result = self.engine.update(self.core, self.enabled)
        if result is not None:
            self.last_result = result

    def on_destroy(self) -> None:
        if self.attachment is not None:
            self.attachment.teardown()
        if self._scheduler is not None:
            self._scheduler.remove_update(self.on_update)
            self._scheduler = None
