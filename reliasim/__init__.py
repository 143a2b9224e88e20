"""reliasim: curve-driven stochastic failure simulation.

reliasim decides, tick by tick, whether a simulated host fails. Each host
carries reliability modules whose keyframed failure-rate curves (possibly
inherited from the host's prototype) feed a constant-hazard survival model;
transient momentary failure rates override the base rate while higher.

Primary API:
    ReliabilityModule - host-attached reliability contributor
    FloatCurve - keyframed failure-rate curve
    Host - simulated entity with prototype and module list
    SimulatedCore, CoreRegistry - per-host core and its resolver
    TickScheduler - cooperative per-tick driver
    Simulation - scenario runner

Example:
    from reliasim import (
        ConditionQueryEvaluator, CoreRegistry, FloatCurve, Host,
        ReliabilityModule, SimulatedCore, TickScheduler,
    )

    evaluator = ConditionQueryEvaluator()
    proto = Host(name="LV-T30", part_name="LV-T30", modules=[])
    ReliabilityModule(evaluator, curve=FloatCurve(["0 1e-3", "1000 1e-5"])).attach_to(proto)

    host = Host(name="Booster-1", part_name="LV-T30", prototype=proto)
    module = ReliabilityModule(evaluator).attach_to(host)

    scheduler, registry = TickScheduler(), CoreRegistry()
    module.on_awake(scheduler, registry)
    core = SimulatedCore(host)
    registry.register(host, core)
    core.start_operating()
    for _ in range(100):
        core.advance(1.0)
        scheduler.step()
"""

from __future__ import annotations

from reliasim import cli, logging
from reliasim._version import __version__
from reliasim.attachment import AttachmentTask, AttachState, TickScheduler
from reliasim.config import RELIABILITY_CONFIG, ReliabilityConfig
from reliasim.core import CoreRegistry, FailureEvent, SimulatedCore
from reliasim.engine import ReliabilityEngine, TickResult
from reliasim.model import (
    ConditionQueryEvaluator,
    ConfigurationScope,
    CurveError,
    FloatCurve,
    Host,
    MomentaryFailureRate,
    PersistedModuleState,
    ReliabilityState,
    StateError,
    load_curve_from_prototype,
)
from reliasim.mtbf import MTBFUnit, failure_rate_to_mtbf, failure_rate_to_mtbf_string
from reliasim.reliability import ReliabilityModule
from reliasim.seed_manager import SeedManager
from reliasim.simulation import Simulation, SimulationResult

__all__ = [
    # Version
    "__version__",
    # Model
    "FloatCurve",
    "CurveError",
    "Host",
    "ReliabilityState",
    "PersistedModuleState",
    "MomentaryFailureRate",
    "StateError",
    "ConfigurationScope",
    "ConditionQueryEvaluator",
    "load_curve_from_prototype",
    # Engine and lifecycle
    "ReliabilityModule",
    "ReliabilityEngine",
    "TickResult",
    "AttachmentTask",
    "AttachState",
    "TickScheduler",
    # Collaborators
    "SimulatedCore",
    "CoreRegistry",
    "FailureEvent",
    "SeedManager",
    # Display
    "MTBFUnit",
    "failure_rate_to_mtbf",
    "failure_rate_to_mtbf_string",
    # Configuration
    "ReliabilityConfig",
    "RELIABILITY_CONFIG",
    # Simulation
    "Simulation",
    "SimulationResult",
    # Utilities
    "cli",
    "logging",
]
