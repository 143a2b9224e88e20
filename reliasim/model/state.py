"""Persisted reliability state and per-tick snapshots.

`ReliabilityState` holds the two scalars the engine carries between ticks.
`PersistedModuleState` is the versioned record written for a module: the
scalars, the configuration scope string and the optional curve definition.
The record maps to a plain dict so any storage format (YAML, JSON) can carry
it; `reliasim/schemas/state.json` describes its shape.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Mapping, Optional

import jsonschema

from reliasim.model.curve import CurveError, FloatCurve

__all__ = [
    "STATE_VERSION",
    "StateError",
    "MomentaryFailureRate",
    "ReliabilityState",
    "PersistedModuleState",
]

STATE_VERSION = 1


class StateError(ValueError):
    """Raised when a persisted state record is malformed."""


@dataclass(frozen=True)
class MomentaryFailureRate:
    """Transient failure rate reported by the core for the current tick.

    Attributes:
        valid: Whether any momentary rate is currently in effect.
        failure_rate: The worst (highest) momentary rate, meaningful only if valid.
    """

    valid: bool = False
    failure_rate: float = 0.0


@dataclass
class ReliabilityState:
    """Engine bookkeeping between accepted ticks.

    Attributes:
        last_check: Operating time of the last accepted check (>= 0).
        last_reliability: Survival probability computed at that check, in (0, 1].
    """

    last_check: float = 0.0
    last_reliability: float = 1.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.last_check) or self.last_check < 0:
            raise StateError(f"lastCheck must be a finite value >= 0, got {self.last_check}")
        if not (0.0 < self.last_reliability <= 1.0):
            raise StateError(
                f"lastReliability must be within (0, 1], got {self.last_reliability}"
            )


@lru_cache(maxsize=None)
def _state_schema() -> Dict[str, Any]:
    with (
        resources.files("reliasim.schemas")
        .joinpath("state.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


@dataclass
class PersistedModuleState:
    """Versioned serialized form of a reliability module.

    Attributes:
        configuration: Scope string as configured (may be empty).
        state: Engine scalars.
        curve: Locally defined curve, if the record carries one.
        version: Record version; only `STATE_VERSION` is understood.
    """

    configuration: str = ""
    state: ReliabilityState = field(default_factory=ReliabilityState)
    curve: Optional[FloatCurve] = None
    version: int = STATE_VERSION

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "PersistedModuleState":
        """Validate and decode a persisted node.

        Raises:
            StateError: If the node violates the schema, carries an unknown
                version, or holds out-of-range values or an invalid curve.
        """
        try:
            jsonschema.validate(dict(node), _state_schema())
        except jsonschema.ValidationError as exc:
            raise StateError(f"invalid persisted state: {exc.message}") from exc

        version = int(node.get("version", STATE_VERSION))
        if version != STATE_VERSION:
            raise StateError(f"unsupported state version {version}")

        state = ReliabilityState(
            last_check=float(node.get("lastCheck", 0.0)),
            last_reliability=float(node.get("lastReliability", 1.0)),
        )

        curve = None
        if "reliabilityCurve" in node:
            try:
                curve = FloatCurve.from_node(node["reliabilityCurve"])
            except CurveError as exc:
                raise StateError(f"invalid reliabilityCurve: {exc}") from exc

        return cls(
            configuration=str(node.get("configuration", "")),
            state=state,
            curve=curve,
            version=version,
        )

    def to_node(self) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "version": self.version,
            "configuration": self.configuration,
            "lastCheck": self.state.last_check,
            "lastReliability": self.state.last_reliability,
        }
        if self.curve is not None:
            node["reliabilityCurve"] = self.curve.to_node()
        return node
