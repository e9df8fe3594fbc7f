from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .color import blend_colors, color_distance
from .geometry import (
    Point,
    crosses_path,
    find_join,
    heading,
    interpolate_angle,
    offset_point,
    round_half_away,
    turn_angle,
)
from .logging_config import get_module_logger
from .network import as_segment_array
from .options import TracingOptions, clamp
from .raster import RasterSampler
from .smoothing import smooth_path


logger = get_module_logger(__name__)


EDGE_MARGIN = 10

SEED_RING_SAMPLES = 32
SEED_RING_STEP = math.pi / 16.0

SCAN_ANGLE_STEP = math.pi / 32.0
SCAN_ARC_STANDARD = math.pi / 3.0
SCAN_ARC_SHARP = math.pi / 1.5
SCAN_ARC_GAP = math.pi / 4.0
ANGLE_PENALTY_WEIGHT = 10.0

CENTER_PROBE_DISTANCE = 100
CENTER_TOLERANCE_FACTOR = 1.1

ANGLE_SMOOTHING_FACTOR = 0.3
COLOR_ADAPTATION_RATE = 0.05

MAX_FOLLOW_STEPS = 10_000


class StopReason(str, Enum):
    EDGE = "edge-of-image"
    NO_CANDIDATE = "no-candidate"
    SHARP_TURN = "sharp-turn"
    SELF_INTERSECTION = "self-intersection"
    JOINED_NETWORK = "joined-network"
    COLOR_DRIFT = "color-drift"
    INVALID_SEED = "invalid-seed"
    STEP_LIMIT = "step-limit"


@dataclass(frozen=True)
class ScanPass:
    """One cone of the multi-stage scan, relative to step size and colour tolerance."""
    half_width: float
    radius_factor: float
    tolerance_factor: float


SCAN_PASSES: Tuple[ScanPass, ...] = (
    ScanPass(SCAN_ARC_STANDARD, 1.0, 1.0),
    ScanPass(SCAN_ARC_SHARP, 1.0, 1.3),
    ScanPass(SCAN_ARC_GAP, 2.5, 1.5),   # gap jump
)


@dataclass(frozen=True)
class ScanResult:
    point: Point
    angle: float


@dataclass(frozen=True)
class FollowState:
    """
    Everything one step needs to know about the walk so far.

    ``target_color`` adapts slowly to the colours visited; ``origin_color``
    stays fixed and is only used to detect cumulative drift.
    """
    current: Point
    heading: float
    target_color: int
    origin_color: int

    @classmethod
    def start(cls, sampler: RasterSampler, point: Point, start_heading: float) -> "FollowState":
        color = sampler.color_at(point[0], point[1])
        return cls(current=point, heading=start_heading, target_color=color, origin_color=color)


@dataclass(frozen=True)
class StepOutcome:
    state: FollowState
    point: Optional[Point]
    stop: Optional[StopReason]


@dataclass(frozen=True)
class FollowResult:
    points: Tuple[Point, ...]
    stop_reason: StopReason


@dataclass(frozen=True)
class TraceResult:
    points: Tuple[Point, ...]
    seed: Point
    initial_heading: float
    forward: FollowResult
    backward: FollowResult

    @property
    def is_empty(self) -> bool:
        """Fewer than two points: nothing worth keeping was traced."""
        return len(self.points) < 2

    def __len__(self) -> int:
        return len(self.points)


def is_near_edge(point: Point, width: int, height: int, margin: int = EDGE_MARGIN) -> bool:
    x, y = point
    return x <= margin or y <= margin or x >= width - margin or y >= height - margin


class RiverTracer:
    """
    Follow a river centerline through an image from a seed pixel.

    The tracer holds only its options; every call builds its own state, so
    one instance can be reused for any number of traces.

    Example
    -------
    >>> tracer = RiverTracer(TracingOptions(step_size=20))
    >>> result = tracer.run(ArraySampler(pixels), (120, 64), network=segments)
    >>> result.points, result.forward.stop_reason
    """

    def __init__(self, options: Optional[TracingOptions] = None):
        self.options = options if options is not None else TracingOptions()

    ##############################################################
    ##### Seed heading                                   #########
    ##############################################################

    def estimate_heading(self, sampler: RasterSampler, seed: Point, seed_color: int) -> float:
        """Angle of the ring sample (radius = step size) whose colour is closest to the seed's."""
        best_angle = 0.0
        best_diff = math.inf
        for k in range(SEED_RING_SAMPLES):
            angle = k * SEED_RING_STEP
            x, y = offset_point(seed, angle, self.options.step_size)
            if not sampler.contains(x, y):
                continue
            diff = color_distance(seed_color, sampler.color_at(x, y))
            if diff < best_diff:
                best_diff = diff
                best_angle = angle
        return best_angle

    ##############################################################
    ##### Scanning                                       #########
    ##############################################################

    def scan(
        self,
        sampler: RasterSampler,
        center: Point,
        base_angle: float,
        target_color: int,
        half_width: float,
        radius: float,
        tolerance: float,
    ) -> Optional[ScanResult]:
        """
        Best sample on an arc of ``radius`` spanning ``base_angle +/- half_width``.

        A sample qualifies when its colour distance to ``target_color`` is
        below ``tolerance``; among those the lowest
        ``distance + 10 * |angle offset|`` wins (first one on ties).
        """
        n_steps = int(math.floor(2.0 * half_width / SCAN_ANGLE_STEP + 1e-9))

        best: Optional[ScanResult] = None
        best_score = math.inf
        for k in range(n_steps + 1):
            offset = -half_width + k * SCAN_ANGLE_STEP
            angle = base_angle + offset
            x, y = offset_point(center, angle, radius)
            if not sampler.contains(x, y):
                continue

            diff = color_distance(target_color, sampler.color_at(x, y))
            if diff >= tolerance:
                continue

            score = diff + ANGLE_PENALTY_WEIGHT * abs(offset)
            if score < best_score:
                best_score = score
                best = ScanResult(point=(x, y), angle=angle)
        return best

    def multi_stage_scan(
        self,
        sampler: RasterSampler,
        center: Point,
        base_angle: float,
        target_color: int,
    ) -> Optional[ScanResult]:
        opts = self.options
        for scan_pass in SCAN_PASSES:
            found = self.scan(
                sampler,
                center,
                base_angle,
                target_color,
                half_width=scan_pass.half_width,
                radius=opts.step_size * scan_pass.radius_factor,
                tolerance=opts.color_tolerance * scan_pass.tolerance_factor,
            )
            if found is not None:
                return found
        return None

    ##############################################################
    ##### Centering                                      #########
    ##############################################################

    def _probe_extent(
        self,
        sampler: RasterSampler,
        point: Point,
        ux: float,
        uy: float,
        target_color: int,
        tolerance: float,
    ) -> int:
        for r in range(CENTER_PROBE_DISTANCE):
            x = round_half_away(point[0] + ux * r)
            y = round_half_away(point[1] + uy * r)
            if not sampler.contains(x, y):
                return r
            if color_distance(target_color, sampler.color_at(x, y)) >= tolerance:
                return r
        return CENTER_PROBE_DISTANCE

    def center_on_feature(
        self,
        sampler: RasterSampler,
        point: Point,
        angle: float,
        target_color: int,
    ) -> Point:
        """
        Slide ``point`` across the heading to the middle of the matching colour run.

        Both sides are probed up to CENTER_PROBE_DISTANCE pixels; if neither
        side ends within that range (open water) the point is kept as is.
        """
        tolerance = self.options.color_tolerance * CENTER_TOLERANCE_FACTOR
        perp = angle + math.pi / 2.0
        ux = math.cos(perp)
        uy = math.sin(perp)

        left = self._probe_extent(sampler, point, ux, uy, target_color, tolerance)
        right = self._probe_extent(sampler, point, -ux, -uy, target_color, tolerance)
        if left == CENTER_PROBE_DISTANCE and right == CENTER_PROBE_DISTANCE:
            return point

        shift = int((left - right) / 2)
        x = round_half_away(point[0] + ux * shift)
        y = round_half_away(point[1] + uy * shift)
        return (
            int(clamp(x, 0, sampler.width - 1)),
            int(clamp(y, 0, sampler.height - 1)),
        )

    ##############################################################
    ##### Step engine                                    #########
    ##############################################################

    def _turn_too_sharp(self, path: Sequence[Point], candidate: Point) -> bool:
        if len(path) < 2:
            return False
        turn = turn_angle(path[-2], path[-1], candidate)
        return abs(math.degrees(turn)) >= self.options.max_turn_angle_deg

    def step(
        self,
        sampler: RasterSampler,
        path: Sequence[Point],
        state: FollowState,
        network: np.ndarray,
    ) -> StepOutcome:
        """
        Advance the walk by one step.

        ``path`` is the walk so far and must end at ``state.current``; it is
        not modified. The outcome carries the next state, the point to
        append (if any) and the stop reason (if the walk ends here).
        """
        opts = self.options
        width, height = sampler.width, sampler.height

        if is_near_edge(state.current, width, height):
            return StepOutcome(state, None, StopReason.EDGE)

        found = self.multi_stage_scan(sampler, state.current, state.heading, state.target_color)
        if found is None:
            return StepOutcome(state, None, StopReason.NO_CANDIDATE)

        candidate = self.center_on_feature(sampler, found.point, found.angle, state.target_color)

        if self._turn_too_sharp(path, candidate):
            return StepOutcome(state, None, StopReason.SHARP_TURN)

        if crosses_path(path, candidate):
            return StepOutcome(state, None, StopReason.SELF_INTERSECTION)

        if network.shape[0] > 0:
            join = find_join(candidate, network, opts.join_distance)
            if join is not None:
                jx, jy = join.point
                joined = (int(clamp(jx, 0, width - 1)), int(clamp(jy, 0, height - 1)))
                return StepOutcome(state, joined, StopReason.JOINED_NETWORK)

        new_heading = interpolate_angle(state.heading, heading(state.current, candidate),
                                        ANGLE_SMOOTHING_FACTOR)
        new_color = sampler.color_at(candidate[0], candidate[1])

        if color_distance(state.origin_color, new_color) > opts.max_jump:
            moved = FollowState(candidate, new_heading, state.target_color, state.origin_color)
            return StepOutcome(moved, candidate, StopReason.COLOR_DRIFT)

        next_state = FollowState(
            current=candidate,
            heading=new_heading,
            target_color=blend_colors(state.target_color, new_color, COLOR_ADAPTATION_RATE),
            origin_color=state.origin_color,
        )
        return StepOutcome(next_state, candidate, None)

    def follow(
        self,
        sampler: RasterSampler,
        start: Point,
        start_heading: float,
        network=None,
    ) -> FollowResult:
        """Grow a path from ``start`` along ``start_heading`` until a stop condition fires."""
        segments = as_segment_array(network)
        path: List[Point] = [start]

        if not sampler.contains(start[0], start[1]):
            return FollowResult(tuple(path), StopReason.INVALID_SEED)

        state = FollowState.start(sampler, start, start_heading)
        for _ in range(MAX_FOLLOW_STEPS):
            outcome = self.step(sampler, path, state, segments)
            if outcome.point is not None:
                path.append(outcome.point)
            if outcome.stop is not None:
                logger.debug(f"Walk from {start} stopped after {len(path) - 1} step(s): {outcome.stop.value}")
                return FollowResult(tuple(path), outcome.stop)
            state = outcome.state

        logger.warning(f"Walk from {start} hit the {MAX_FOLLOW_STEPS} step limit.")
        return FollowResult(tuple(path), StopReason.STEP_LIMIT)

    ##############################################################
    ##### Orchestration                                  #########
    ##############################################################

    def run(self, sampler: RasterSampler, seed: Point, network=None) -> TraceResult:
        """
        Trace in both directions from ``seed`` and join the halves.

        Parameters
        ----------
        sampler : RasterSampler
            Immutable image snapshot (pixel space, x right, y down).
        seed : (int, int)
            Starting pixel.
        network : array-like, optional
            Existing waterway segments, anything ``as_segment_array`` accepts.
            Used only to stop the walk when it reaches them.

        Returns
        -------
        TraceResult
            ``points`` runs from the far end of the backward walk, through the
            seed (once), to the far end of the forward walk.
        """
        seed = (int(seed[0]), int(seed[1]))
        segments = as_segment_array(network)

        if not sampler.contains(seed[0], seed[1]):
            logger.debug(f"Seed {seed} is outside the {sampler.width}x{sampler.height} raster.")
            stub = FollowResult((seed,), StopReason.INVALID_SEED)
            return TraceResult(points=(seed,), seed=seed, initial_heading=0.0, forward=stub, backward=stub)

        seed_color = sampler.color_at(seed[0], seed[1])
        initial = self.estimate_heading(sampler, seed, seed_color)

        forward = self.follow(sampler, seed, initial, segments)
        backward = self.follow(sampler, seed, initial + math.pi, segments)

        points = list(reversed(backward.points))[:-1] + list(forward.points)
        if self.options.smoothness > 0:
            points = smooth_path(points, self.options.smoothness)

        logger.debug(
            f"Traced {len(points)} point(s) from {seed}: "
            f"forward {forward.stop_reason.value}, backward {backward.stop_reason.value}"
        )
        return TraceResult(
            points=tuple(points),
            seed=seed,
            initial_heading=initial,
            forward=forward,
            backward=backward,
        )

    def trace(self, sampler: RasterSampler, seed: Point, network=None) -> List[Point]:
        """Ordered centerline points; see ``run`` for the stop reasons."""
        return list(self.run(sampler, seed, network).points)


def trace_river(
    sampler: RasterSampler,
    seed: Point,
    network=None,
    options: Optional[TracingOptions] = None,
) -> TraceResult:
    return RiverTracer(options).run(sampler, seed, network)
