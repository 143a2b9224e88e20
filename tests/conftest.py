"""Global pytest configuration and shared fixtures.

Provides test doubles for the collaborators reliability modules consume:
a core with scripted operating data and random rolls, and prototype/instance
host pairs.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

import pytest

from reliasim.model.curve import FloatCurve
from reliasim.model.host import Host
from reliasim.model.scope import ConditionQueryEvaluator, ScopeCondition, ScopeRule
from reliasim.model.state import MomentaryFailureRate
from reliasim.mtbf import MTBFUnit, failure_rate_to_mtbf_string


class ScriptedRandom:
    """Stand-in for `random.Random` returning a fixed roll sequence."""

    def __init__(self, rolls: Iterable[float], default: float = 0.0) -> None:
        self._rolls = list(rolls)
        self._default = default
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if self._rolls:
            return self._rolls.pop(0)
        return self._default


class ScriptedCore:
    """Core double whose inputs are plain attributes set by the test."""

    def __init__(
        self,
        operating_time: float = 0.0,
        base_failure_rate: float = 1e-3,
        momentary: Optional[MomentaryFailureRate] = None,
        rolls: Iterable[float] = (),
    ) -> None:
        self.operating_time = operating_time
        self.base_failure_rate = base_failure_rate
        self.momentary = momentary or MomentaryFailureRate()
        self.random = ScriptedRandom(rolls)
        self.failures: List[float] = []

    def get_operating_time(self) -> float:
        return self.operating_time

    def get_base_failure_rate(self) -> float:
        return self.base_failure_rate

    def get_worst_momentary_failure_rate(self) -> MomentaryFailureRate:
        return self.momentary

    def trigger_failure(self) -> None:
        self.failures.append(self.operating_time)

    def failure_rate_to_mtbf_string(
        self, failure_rate: float, units: MTBFUnit, maximum: int
    ) -> str:
        return failure_rate_to_mtbf_string(failure_rate, units, maximum)


@pytest.fixture
def scripted_core() -> Callable[..., ScriptedCore]:
    """Factory for `ScriptedCore` instances."""
    return ScriptedCore


@pytest.fixture
def scripted_random() -> Callable[..., ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def evaluator() -> ConditionQueryEvaluator:
    """Evaluator with an ``upper_stage`` scope (stage >= 2)."""
    return ConditionQueryEvaluator(
        {
            "upper_stage": ScopeRule(conditions=[ScopeCondition("stage", ">=", 2)]),
            "never": ScopeRule(conditions=[ScopeCondition("missing", "any_value")]),
        }
    )


@pytest.fixture
def flat_curve() -> FloatCurve:
    return FloatCurve(["0 0.001", "1000 0.001"])


@pytest.fixture
def host_pair() -> Callable[..., tuple[Host, Host]]:
    """Factory returning ``(prototype, instance)`` with an empty module list each."""

    def make(part_name: str = "LV-T30", **attrs) -> tuple[Host, Host]:
        proto = Host(name=part_name, part_name=part_name, modules=[])
        host = Host(name=f"{part_name}-1", part_name=part_name, prototype=proto, attrs=attrs)
        return proto, host

    return make
