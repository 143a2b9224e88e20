"""Tests for the per-tick failure decision in `reliasim.engine`."""

import math
import sys

import pytest

from reliasim.config import ReliabilityConfig
from reliasim.engine import ReliabilityEngine, select_failure_rate, survival_probability
from reliasim.model.state import MomentaryFailureRate, ReliabilityState


def _engine() -> ReliabilityEngine:
    return ReliabilityEngine(ReliabilityState())


class TestHelpers:
    def test_survival_at_origin_is_exactly_one(self) -> None:
        assert survival_probability(0.5, 0.0) == 1.0
        assert survival_probability(1e-3, 0.0) == 1.0

    def test_survival_matches_exponential(self) -> None:
        assert survival_probability(1e-3, 100.0) == pytest.approx(math.exp(-0.1))

    def test_momentary_overrides_only_when_valid_and_higher(self) -> None:
        assert select_failure_rate(1e-3, MomentaryFailureRate(True, 1e-2)) == 1e-2
        assert select_failure_rate(1e-3, MomentaryFailureRate(True, 1e-4)) == 1e-3
        assert select_failure_rate(1e-3, MomentaryFailureRate(False, 1e-2)) == 1e-3


class TestUpdate:
    def test_disabled_or_missing_core_is_noop(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=10.0)
        assert engine.update(core, enabled=False) is None
        assert engine.update(None, enabled=True) is None
        assert core.random.draws == 0
        assert engine.state == ReliabilityState()

    def test_accepted_tick_updates_state(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=10.0, base_failure_rate=1e-3, rolls=[0.2])
        result = engine.update(core, enabled=True)

        assert result is not None
        assert engine.state.last_check == 10.0
        assert engine.state.last_reliability == pytest.approx(math.exp(-0.01))
        assert result.survival_chance == pytest.approx(math.exp(-0.01))
        assert result.failure_roll == 0.2
        assert result.failed is False
        assert core.failures == []

    def test_roll_above_survival_triggers_failure(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=10.0, base_failure_rate=1e-3, rolls=[0.999])
        result = engine.update(core, enabled=True)
        assert result.failed is True
        assert core.failures == [10.0]

    def test_survival_chance_is_ratio_to_previous_check(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=10.0, base_failure_rate=1e-2, rolls=[0.0, 0.0])
        engine.update(core, enabled=True)
        core.operating_time = 15.0
        result = engine.update(core, enabled=True)
        assert result.survival_chance == pytest.approx(math.exp(-0.15) / math.exp(-0.10))

    def test_zero_rate_never_fails(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(base_failure_rate=0.0, rolls=[0.999999] * 50)
        for t in range(1, 51):
            core.operating_time = float(t)
            result = engine.update(core, enabled=True)
            assert result.survival_chance == 1.0
        assert core.failures == []

    def test_momentary_rate_used_when_higher(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(
            operating_time=2.0,
            base_failure_rate=1e-4,
            momentary=MomentaryFailureRate(valid=True, failure_rate=0.5),
            rolls=[0.0],
        )
        result = engine.update(core, enabled=True)
        assert result.current_failure_rate == 0.5
        assert result.base_failure_rate == 1e-4
        assert result.reliability == pytest.approx(math.exp(-1.0))

    def test_negative_curve_rate_clamped_to_zero(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=5.0, base_failure_rate=-1.249, rolls=[0.999])
        result = engine.update(core, enabled=True)
        assert result.current_failure_rate == 0.0
        assert engine.state.last_reliability == 1.0
        assert result.failed is False
        ReliabilityState(engine.state.last_check, engine.state.last_reliability)


class TestSaturation:
    def test_underflow_keeps_reliability_positive(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=800.0, base_failure_rate=1.0, rolls=[0.0])
        result = engine.update(core, enabled=True)
        assert result.reliability == sys.float_info.min
        assert engine.state.last_reliability == sys.float_info.min
        ReliabilityState(engine.state.last_check, engine.state.last_reliability)

    def test_saturated_survival_stops_failing(self, scripted_core, scripted_random) -> None:
        engine = _engine()
        core = scripted_core(operating_time=800.0, base_failure_rate=1.0, rolls=[0.0])
        engine.update(core, enabled=True)

        core.random = scripted_random([0.999] * 10)
        for t in range(801, 811):
            core.operating_time = float(t)
            result = engine.update(core, enabled=True)
            assert result.survival_chance == 1.0
        assert core.failures == []


class TestDebounceAndReset:
    def test_sub_interval_advance_is_noop(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=5.0, rolls=[0.0, 0.0])
        engine.update(core, enabled=True)
        snapshot = ReliabilityState(engine.state.last_check, engine.state.last_reliability)

        core.operating_time = 5.9
        assert engine.update(core, enabled=True) is None
        assert engine.state == snapshot
        assert core.random.draws == 1

        core.operating_time = 6.0
        assert engine.update(core, enabled=True) is not None
        assert core.random.draws == 2

    def test_reset_sentinel_zeroes_last_check_only(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(operating_time=100.0, rolls=[0.0])
        engine.update(core, enabled=True)
        stale = engine.state.last_reliability

        core.operating_time = -1.0
        assert engine.update(core, enabled=True) is None
        assert engine.state.last_check == 0.0
        assert engine.state.last_reliability == stale
        assert core.random.draws == 1

    def test_after_reset_half_unit_not_accepted(self, scripted_core) -> None:
        engine = ReliabilityEngine(ReliabilityState(last_check=40.0))
        core = scripted_core(operating_time=-1.0, rolls=[0.0])
        engine.update(core, enabled=True)
        assert engine.state.last_check == 0.0

        core.operating_time = 0.5
        assert engine.update(core, enabled=True) is None
        assert engine.state.last_check == 0.0

        core.operating_time = 1.0
        assert engine.update(core, enabled=True) is not None
        assert engine.state.last_check == 1.0

    def test_stale_reliability_carries_into_next_session(self, scripted_core) -> None:
        engine = _engine()
        core = scripted_core(base_failure_rate=1e-2, rolls=[0.0, 0.0])
        core.operating_time = 50.0
        engine.update(core, enabled=True)
        core.operating_time = -1.0
        engine.update(core, enabled=True)

        core.operating_time = 1.0
        result = engine.update(core, enabled=True)
        # New session's S(1) divided by the previous session's S(50)
        assert result.survival_chance == pytest.approx(math.exp(-0.01) / math.exp(-0.5))
        assert result.survival_chance > 1.0

    def test_custom_check_interval(self, scripted_core) -> None:
        engine = ReliabilityEngine(ReliabilityState(), ReliabilityConfig(check_interval=5.0))
        core = scripted_core(operating_time=4.0, rolls=[0.0])
        assert engine.update(core, enabled=True) is None
        core.operating_time = 5.0
        assert engine.update(core, enabled=True) is not None


def test_end_to_end_failure_fires_once_at_tick_37(scripted_core) -> None:
    """Flat 1e-3 rate stepped through t = 1..1000 with a crafted roll sequence."""
    survival = math.exp(-1e-3)
    rolls = [0.5] * 36 + [0.9995] + [0.0] * (1000 - 37)
    assert 0.9995 > survival > 0.5

    engine = _engine()
    core = scripted_core(base_failure_rate=1e-3, rolls=rolls)
    failed_at = []
    for tick in range(1, 1001):
        core.operating_time = float(tick)
        result = engine.update(core, enabled=True)
        assert result is not None
        assert result.survival_chance == pytest.approx(survival)
        if result.failed:
            failed_at.append(tick)

    assert failed_at == [37]
    assert core.failures == [37.0]
    assert core.random.draws == 1000
