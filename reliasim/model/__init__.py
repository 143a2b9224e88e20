"""Reliability model package.

Defines the data the reliability engine works on: keyframed failure-rate
curves, persisted module state, configuration scopes and the host objects
modules attach to.

Public entry points:

- `reliasim.model.curve` - `FloatCurve` keyframed failure-rate curves
- `reliasim.model.state` - persisted state record and momentary rate snapshot
- `reliasim.model.scope` - configuration scopes and predicate evaluators
- `reliasim.model.host` - host entity model
- `reliasim.model.loader` - curve inheritance from a host's prototype
"""

from .curve import CurveError, FloatCurve, Keyframe
from .host import Host
from .loader import load_curve_from_prototype
from .scope import (
    ConditionQueryEvaluator,
    ConfigurationScope,
    QueryEvaluator,
    ScopeCondition,
    ScopeRule,
)
from .state import (
    STATE_VERSION,
    MomentaryFailureRate,
    PersistedModuleState,
    ReliabilityState,
    StateError,
)

__all__ = [
    # Curves
    "FloatCurve",
    "Keyframe",
    "CurveError",
    "load_curve_from_prototype",
    # State
    "ReliabilityState",
    "PersistedModuleState",
    "MomentaryFailureRate",
    "StateError",
    "STATE_VERSION",
    # Scopes
    "ConfigurationScope",
    "QueryEvaluator",
    "ConditionQueryEvaluator",
    "ScopeCondition",
    "ScopeRule",
    # Hosts
    "Host",
]
