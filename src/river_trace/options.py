from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Tuple

from .geometry import round_half_away


STEP_SIZE_RANGE: Tuple[int, int] = (10, 60)
COLOR_TOLERANCE_RANGE: Tuple[float, float] = (10.0, 130.0)
MAX_JUMP_RANGE: Tuple[float, float] = (15.0, 200.0)
MAX_TURN_ANGLE_RANGE: Tuple[float, float] = (30.0, 170.0)
SMOOTHNESS_RANGE: Tuple[int, int] = (0, 10)

_RANGES: Dict[str, Tuple[float, float]] = {
    "step_size": STEP_SIZE_RANGE,
    "color_tolerance": COLOR_TOLERANCE_RANGE,
    "max_jump": MAX_JUMP_RANGE,
    "max_turn_angle_deg": MAX_TURN_ANGLE_RANGE,
    "smoothness": SMOOTHNESS_RANGE,
}
_INTEGER_FIELDS = {"step_size", "smoothness"}


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0", ""}


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def _as_flag(name: str, value: Any) -> bool:
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"Option {name} expects a boolean, got {value!r}")
    return bool(value)


@dataclass(frozen=True)
class TracingOptions:
    """
    Parameters for one tracing run.

    Attributes
    ----------
    step_size : int
        Nominal pixel distance advanced per step.
    color_tolerance : float
        Maximum colour distance accepted by one step.
    max_jump : float
        Maximum colour distance from the start colour before the trace stops.
    max_turn_angle_deg : float
        Heading change (degrees) at which a step is rejected.
    smoothness : int
        Number of corner-rounding passes applied to the finished path.
    river : bool
        Tag the exported line as a river (True) or a stream (False).
    intermittent : bool
        Tag the exported line as intermittent.

    The tracer assumes the numeric fields are already inside their ranges;
    use ``clamped`` or ``from_mapping`` when the values come from a user.
    """
    step_size: int = 15
    color_tolerance: float = 55.0
    max_jump: float = 95.0
    max_turn_angle_deg: float = 140.0
    smoothness: int = 1
    river: bool = True
    intermittent: bool = False

    @property
    def join_distance(self) -> float:
        return 1.5 * self.step_size

    @classmethod
    def clamped(cls, **values: Any) -> "TracingOptions":
        """Build options with every numeric field clamped into its range."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise TypeError(f"Unknown tracing option(s): {', '.join(sorted(unknown))}")

        kwargs: Dict[str, Any] = {}
        for name, value in values.items():
            if value is None:
                continue
            if name in _RANGES:
                lo, hi = _RANGES[name]
                if name in _INTEGER_FIELDS:
                    kwargs[name] = int(clamp(round_half_away(float(value)), lo, hi))
                else:
                    kwargs[name] = float(clamp(float(value), lo, hi))
            else:
                kwargs[name] = _as_flag(name, value)
        return cls(**kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TracingOptions":
        """Like ``clamped`` but ignores keys that are not tracing options."""
        known = {f.name for f in fields(cls)}
        return cls.clamped(**{k: v for k, v in data.items() if k in known})

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
