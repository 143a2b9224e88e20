"""Scenario-driven simulation runner.

Builds prototypes, host instances, reliability modules and cores from a
validated scenario mapping (see `reliasim.dsl.load_scenario_yaml`) and drives
them with a `TickScheduler`.

Per tick ``k`` (simulation time ``t = k * dt``), in order:

1. hosts whose ``ready_at`` has come finish construction;
2. cores whose ``core_at`` has come are registered;
3. hosts whose ``destroy_at`` has come are destroyed;
4. run windows and momentary rates are applied for time ``t``;
5. every core advances by ``dt``;
6. the scheduler steps (module updates, then attachment tasks).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from reliasim.attachment import TickScheduler
from reliasim.config import RELIABILITY_CONFIG, ReliabilityConfig
from reliasim.core import CoreRegistry, FailureEvent, SimulatedCore
from reliasim.logging import get_logger
from reliasim.model.curve import FloatCurve
from reliasim.model.host import Host
from reliasim.model.scope import ConditionQueryEvaluator, ScopeCondition, ScopeRule
from reliasim.reliability import ReliabilityModule
from reliasim.seed_manager import SeedManager

logger = get_logger(__name__)


def build_evaluator(scopes: Dict[str, Any]) -> ConditionQueryEvaluator:
    rules: Dict[str, ScopeRule] = {}
    for name, raw in (scopes or {}).items():
        conditions = [
            ScopeCondition(attr=c["attr"], operator=c["operator"], value=c.get("value"))
            for c in raw.get("conditions", [])
        ]
        rules[name] = ScopeRule(conditions=conditions, logic=raw.get("logic", "and"))
    return ConditionQueryEvaluator(rules)


@dataclass
class HostRun:
    """A host instance plus its scenario-driven schedule."""

    host: Host
    modules: List[ReliabilityModule]
    core: SimulatedCore
    run: List[List[float]] = field(default_factory=list)
    momentary: List[Dict[str, Any]] = field(default_factory=list)
    ready_at: int = 0
    core_at: int = 0
    destroy_at: Optional[int] = None

    def should_operate(self, t: float) -> bool:
        return any(start <= t < stop for start, stop in self.run)

    def active_momentary(self, t: float) -> Dict[str, float]:
        active: Dict[str, float] = {}
        for entry in self.momentary:
            start = entry.get("start", float("-inf"))
            stop = entry.get("stop", float("inf"))
            if start <= t < stop:
                active[entry["name"]] = float(entry["rate"])
        return active


@dataclass
class SimulationResult:
    """Outcome of a simulation run."""

    ticks: int
    dt: float
    seed: Optional[int]
    failures: List[FailureEvent] = field(default_factory=list)
    hosts: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticks": self.ticks,
            "dt": self.dt,
            "seed": self.seed,
            "failures": [
                {
                    "host": f.host,
                    "mission_time": f.mission_time,
                    "operating_time": f.operating_time,
                    "flight_data": f.flight_data,
                }
                for f in self.failures
            ],
            "hosts": self.hosts,
        }


class Simulation:
    """Runs a scenario.

    Args:
        scenario: Validated scenario mapping.
        seed: Overrides the scenario's master seed when given.
        config: Shared tunables.
    """

    def __init__(
        self,
        scenario: Dict[str, Any],
        seed: Optional[int] = None,
        config: ReliabilityConfig = RELIABILITY_CONFIG,
    ) -> None:
        self.scenario = scenario
        self.seed = seed if seed is not None else scenario.get("seed")
        self.ticks = int(scenario.get("ticks", 0))
        self.dt = float(scenario.get("dt", 1.0))
        self.config = config
        self.evaluator = build_evaluator(scenario.get("scopes") or {})
        self.seed_manager = SeedManager(self.seed)
        self.scheduler = TickScheduler()
        self.registry = CoreRegistry()
        self.prototypes: Dict[str, Host] = {}
        self.hosts: List[HostRun] = []
        self.failures: List[FailureEvent] = []

        for part_name, raw in (scenario.get("prototypes") or {}).items():
            self.prototypes[part_name] = self._build_prototype(part_name, raw)
        for raw in scenario.get("hosts") or []:
            self.hosts.append(self._build_host(raw))

    def _build_prototype(self, part_name: str, raw: Dict[str, Any]) -> Host:
        proto = Host(name=part_name, part_name=part_name, attrs=dict(raw.get("attrs") or {}))
        proto.modules = []
        for mod in raw.get("modules") or []:
            curve = None
            if "reliabilityCurve" in mod:
                curve = FloatCurve.from_node(mod["reliabilityCurve"])
            ReliabilityModule(
                self.evaluator,
                configuration=mod.get("configuration", ""),
                curve=curve,
                config=self.config,
            ).attach_to(proto)
        return proto

    def _build_host(self, raw: Dict[str, Any]) -> HostRun:
        proto = self.prototypes[raw["part"]]
        attrs = dict(proto.attrs)
        attrs.update(raw.get("attrs") or {})
        host = Host(name=raw["name"], part_name=proto.part_name, attrs=attrs)

        # Instance modules mirror the prototype's scopes; curves come from the
        # prototype at startup unless persisted state carries one.
        modules: List[ReliabilityModule] = []
        states = raw.get("state") or []
        for idx, proto_module in enumerate(proto.modules or []):
            module = ReliabilityModule(
                self.evaluator,
                configuration=proto_module.scope.raw(),
                config=self.config,
            )
            module.host = host
            module.scope.host = host
            if idx < len(states):
                module.on_load(states[idx])
            module.on_awake(self.scheduler, self.registry)
            modules.append(module)

        rng = self.seed_manager.create_random_state("host", host.name)
        core = SimulatedCore(
            host, rng=rng, config=self.config, flight_data=float(raw.get("flight_data", 0.0))
        )
        core.on_failure.append(self.failures.append)

        return HostRun(
            host=host,
            modules=modules,
            core=core,
            run=[list(w) for w in raw.get("run") or []],
            momentary=list(raw.get("momentary") or []),
            ready_at=int(raw.get("ready_at", 0)),
            core_at=int(raw.get("core_at", 0)),
            destroy_at=raw.get("destroy_at"),
        )

    def _prepare_tick(self, tick: int) -> None:
        t = tick * self.dt
        for hr in self.hosts:
            host = hr.host
            if host.destroyed:
                continue
            if tick >= hr.ready_at and host.modules is None:
                host.prototype = self.prototypes[host.part_name]
                host.modules = list(hr.modules)
                logger.debug("%s: construction complete at tick %d", host.full_name, tick)
            if tick >= hr.core_at and self.registry.get_core(host) is None:
                self.registry.register(host, hr.core)
            if hr.destroy_at is not None and tick >= hr.destroy_at:
                self._destroy(hr)
                continue

            if hr.should_operate(t):
                hr.core.start_operating()
            else:
                hr.core.stop_operating()

            active = hr.active_momentary(t)
            for name in hr.core.momentary_failure_rates():
                if name in active:
                    continue
                hr.core.clear_momentary_failure_rate(name)
            for name, rate in active.items():
                hr.core.set_momentary_failure_rate(name, rate)

            hr.core.advance(self.dt)

    def _destroy(self, hr: HostRun) -> None:
        logger.info("%s: destroyed", hr.host.full_name)
        hr.host.destroy()
        for module in hr.modules:
            module.on_destroy()
        self.registry.unregister(hr.host)

    def step(self, tick: int) -> None:
        self._prepare_tick(tick)
        self.scheduler.step()

    def run(self) -> SimulationResult:
        logger.info(
            "Running %d ticks (dt=%.3f) for %d hosts, seed=%s",
            self.ticks,
            self.dt,
            len(self.hosts),
            self.seed,
        )
        for tick in range(self.ticks):
            self.step(tick)
        logger.info("Simulation finished with %d failures", len(self.failures))
        return self.result()

    def result(self) -> SimulationResult:
        hosts: Dict[str, Dict[str, Any]] = {}
        for hr in self.hosts:
            hosts[hr.host.name] = {
                "part": hr.host.part_name,
                "destroyed": hr.host.destroyed,
                "flight_data": hr.core.flight_data,
                "failures": len(hr.core.failures),
                "modules": [
                    {
                        "attachment": m.attachment.state.value if m.attachment else None,
                        "enabled": m.enabled,
                        "state": m.on_save(),
                        "info": m.get_info(),
                    }
                    for m in hr.modules
                ],
            }
        return SimulationResult(
            ticks=self.ticks,
            dt=self.dt,
            seed=self.seed,
            failures=list(self.failures),
            hosts=hosts,
        )
