"""Keyframed failure-rate curves.

A `FloatCurve` maps an operand (operating time or accumulated flight data) to
a failure rate. Between keys the curve is a cubic Hermite spline driven by the
keys' tangents; outside the key domain it holds the boundary value.

Curves are immutable after construction. Their key data lives in read-only
numpy arrays, which is what makes it safe for many reliability modules to
share one prototype curve by reference.

Serialized form (mapping), either compact:

    key:
      - "0 0.001"
      - "1000 0.00001 0 0"

or explicit:

    keys:
      - {time: 0, value: 0.001, inTangent: 0, outTangent: 0}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np

from reliasim.logging import get_logger

__all__ = ["CurveError", "Keyframe", "FloatCurve"]

_logger = get_logger(__name__)


class CurveError(ValueError):
    """Raised when curve key data cannot be turned into a valid curve."""


@dataclass(frozen=True)
class Keyframe:
    """A single control point of a `FloatCurve`."""

    time: float
    value: float
    in_tangent: float = 0.0
    out_tangent: float = 0.0


KeyLike = Union[Keyframe, Sequence[float], Mapping[str, Any], str]


def _finite(raw: Any, what: str) -> float:
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise CurveError(f"invalid numeric value for {what}: {raw!r}") from None
    if not math.isfinite(val):
        raise CurveError(f"{what} must be finite, got {raw!r}")
    return val


def _parse_key(raw: KeyLike) -> Keyframe:
    """Turn one serialized key into a `Keyframe`.

    Accepts a `Keyframe`, a ``"t v [in out]"`` string, a sequence of two or four
    numbers, or a mapping with ``time``/``value`` and optional tangents.
    """
    if isinstance(raw, Keyframe):
        return raw
    if isinstance(raw, Mapping):
        if "time" not in raw or "value" not in raw:
            raise CurveError(f"curve key mapping needs 'time' and 'value': {raw!r}")
        return Keyframe(
            time=_finite(raw["time"], "key time"),
            value=_finite(raw["value"], "key value"),
            in_tangent=_finite(raw.get("inTangent", 0.0), "inTangent"),
            out_tangent=_finite(raw.get("outTangent", 0.0), "outTangent"),
        )
    parts: Sequence[Any]
    if isinstance(raw, str):
        parts = raw.replace(",", " ").split()
    else:
        parts = list(raw)
    if len(parts) not in (2, 4):
        raise CurveError(
            f"curve key must have 2 or 4 numbers (time value [in out]), got {raw!r}"
        )
    nums = [_finite(p, "curve key") for p in parts]
    if len(nums) == 2:
        return Keyframe(nums[0], nums[1])
    return Keyframe(nums[0], nums[1], nums[2], nums[3])


class FloatCurve:
    """Immutable, ordered keyframed function with clamped extrapolation.

    Args:
        keys: Control points in any of the forms accepted by the serialized
            representation. Out-of-order keys are sorted; duplicate times and
            empty key lists are rejected with `CurveError`.
    """

    __slots__ = ("_times", "_values", "_in", "_out")

    def __init__(self, keys: Iterable[KeyLike]) -> None:
        frames = [_parse_key(k) for k in keys]
        if not frames:
            raise CurveError("curve must contain at least one key")

        times = [f.time for f in frames]
        if any(b < a for a, b in zip(times, times[1:])):
            _logger.warning("Curve keys out of order; sorting %d keys by time", len(frames))
            frames.sort(key=lambda f: f.time)

        for a, b in zip(frames, frames[1:]):
            if a.time == b.time:
                raise CurveError(f"duplicate curve key time {a.time}")

        self._times = self._frozen([f.time for f in frames])
        self._values = self._frozen([f.value for f in frames])
        self._in = self._frozen([f.in_tangent for f in frames])
        self._out = self._frozen([f.out_tangent for f in frames])

    @staticmethod
    def _frozen(data: List[float]) -> np.ndarray:
        arr = np.asarray(data, dtype=float)
        arr.setflags(write=False)
        return arr

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "FloatCurve":
        """Build a curve from its serialized mapping (``key`` or ``keys``)."""
        if not isinstance(node, Mapping):
            raise CurveError("curve definition must be a mapping")
        if "keys" in node:
            raw = node["keys"]
        elif "key" in node:
            raw = node["key"]
        else:
            raise CurveError("curve definition needs a 'key' or 'keys' list")
        if isinstance(raw, (str, Mapping)):
            raw = [raw]
        return cls(raw)

    def to_node(self) -> dict[str, Any]:
        """Serialize to the compact ``key`` form."""
        return {
            "key": [
                f"{k.time!r} {k.value!r} {k.in_tangent!r} {k.out_tangent!r}"
                for k in self.keys
            ]
        }

    @property
    def keys(self) -> Tuple[Keyframe, ...]:
        return tuple(
            Keyframe(float(t), float(v), float(i), float(o))
            for t, v, i, o in zip(self._times, self._values, self._in, self._out)
        )

    @property
    def min_time(self) -> float:
        return float(self._times[0])

    @property
    def max_time(self) -> float:
        return float(self._times[-1])

    def __len__(self) -> int:
        return len(self._times)

    def __repr__(self) -> str:
        return (
            f"FloatCurve(keys={len(self)}, min_time={self.min_time}, "
            f"max_time={self.max_time})"
        )

    def evaluate(self, t: float) -> float:
        """Return the curve value at operand ``t``.

        Values outside ``[min_time, max_time]`` clamp to the nearest boundary key.
        """
        return float(self.evaluate_many(np.asarray([t], dtype=float))[0])

    def evaluate_many(self, ts: Iterable[float]) -> np.ndarray:
        """Vectorized `evaluate` over an array of operands."""
        t = np.clip(np.asarray(ts, dtype=float), self._times[0], self._times[-1])
        if len(self._times) == 1:
            return np.full(t.shape, self._values[0])

        # Segment index k such that times[k] <= t < times[k+1]; the last key
        # belongs to the final segment.
        k = np.searchsorted(self._times, t, side="right") - 1
        k = np.clip(k, 0, len(self._times) - 2)

        t0 = self._times[k]
        dt = self._times[k + 1] - t0
        s = (t - t0) / dt
        s2 = s * s
        s3 = s2 * s

        h00 = 2.0 * s3 - 3.0 * s2 + 1.0
        h10 = s3 - 2.0 * s2 + s
        h01 = -2.0 * s3 + 3.0 * s2
        h11 = s3 - s2

        return (
            h00 * self._values[k]
            + h10 * dt * self._out[k]
            + h01 * self._values[k + 1]
            + h11 * dt * self._in[k + 1]
        )
