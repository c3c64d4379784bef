"""
Kinematic Mapping
=================
Converts circuit quantities into positions on the composite path.

Why is this file needed?
------------------------
1. Carriers: Each charge carrier is a progress value in [0, 1) advected by the
   loop current. This module advances them and resolves them to 3D points.
2. Effects: Field indicators must follow a physical element (the inductor).
   Their placement is derived from the segment's progress interval.

Soft failures here never abort a simulation step: carriers fall back to a
hidden sentinel and indicators are suppressed for the frame.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Collection, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from lcresonance.config import (
    B_FIELD_VISIBILITY_THRESHOLD,
    CHARGE_CARRIER_SPEED_SCALE,
    E_FIELD_VISIBILITY_THRESHOLD,
    HIDDEN_POSITION,
)
from lcresonance.exceptions import EffectRegionUnavailable
from lcresonance.model.path import CompositePath, SegmentKind

if TYPE_CHECKING:
    import numpy.typing as npt

    from lcresonance.model.circuit import CircuitParameters, CircuitState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldIndicator:
    """
    An arrow to be drawn by a renderer.

    Attributes:
        anchor: Base point of the arrow, shape (3,).
        direction: Unit direction, shape (3,).
        magnitude: Normalized strength in [0, 1].
    """
    anchor: tuple[float, float, float]
    direction: tuple[float, float, float]
    magnitude: float


def _as_tuple(v: npt.NDArray[np.float64]) -> tuple[float, float, float]:
    return float(v[0]), float(v[1]), float(v[2])


# ------------------------------------------------------------------------------
# Charge carriers
# ------------------------------------------------------------------------------
def advance(
    progress: Union[float, npt.NDArray[np.float64]],
    flow_speed: float,
    dt: float,
    total_length: float,
    speed_scale: float = CHARGE_CARRIER_SPEED_SCALE
) -> Union[float, npt.NDArray[np.float64]]:
    """
    Advance carrier progress along the loop.

    Args:
        progress: Current progress, scalar or array.
        flow_speed: Signed flow speed (the loop current).
        dt: Sub-step size in seconds.
        total_length: Total path length.
        speed_scale: Calibration from current to visual speed.

    Returns:
        New progress wrapped into [0, 1), same type as the input.
    """
    delta = flow_speed * speed_scale * dt / total_length
    # np.mod is floored: a reversed current wraps to the top of [0, 1)
    wrapped = np.mod(np.asarray(progress, dtype=np.float64) + delta, 1.0)
    # a tiny negative remainder rounds up to exactly 1.0
    wrapped = np.where(wrapped >= 1.0, 0.0, wrapped)

    if np.ndim(progress) == 0:
        return float(wrapped)
    return wrapped


def initial_progress(count: int, rng: np.random.Generator) -> npt.NDArray[np.float64]:
    """Independent, uniformly distributed carrier phases."""
    return rng.random(count)


def resolve_position(
    path: Optional[CompositePath],
    progress: float,
    hidden: Sequence[float] = HIDDEN_POSITION
) -> npt.NDArray[np.float64]:
    """
    Resolve one carrier to a 3D point; the hidden sentinel on any failure.
    """
    try:
        if path is None:
            raise ValueError("No path available.")
        point = path.point_at_progress(progress)
        if not np.all(np.isfinite(point)):
            raise ValueError("Path returned a non-finite point.")
        return point
    except (ValueError, TypeError, IndexError, ArithmeticError) as e:
        logger.debug(f"Carrier at progress {progress!r} hidden: {e}")
        return np.array(hidden, dtype=np.float64)


def resolve_positions(
    path: Optional[CompositePath],
    progress: npt.NDArray[np.float64],
    hidden_kinds: Collection[SegmentKind] = (),
    hidden: Sequence[float] = HIDDEN_POSITION
) -> npt.NDArray[np.float64]:
    """
    Resolve all carriers to an (N, 3) array.

    Carriers with non-finite progress, or lying on a segment whose kind is in
    ``hidden_kinds`` (e.g. the capacitor gap), are emitted at ``hidden``.
    """
    progress = np.asarray(progress, dtype=np.float64)
    out = np.empty((progress.size, 3), dtype=np.float64)
    out[:] = np.asarray(hidden, dtype=np.float64)

    if path is None or progress.size == 0:
        return out

    valid = np.isfinite(progress)
    try:
        if hidden_kinds:
            indices = path.segment_indices(progress[valid])
            hidden_segments = np.array([seg.kind in hidden_kinds for seg in path.segments])
            keep = np.flatnonzero(valid)[~hidden_segments[indices]]
        else:
            keep = np.flatnonzero(valid)

        points = path.point_at_progress(progress[keep])
        finite = np.all(np.isfinite(points), axis=1)
        out[keep[finite]] = points[finite]
    except (ValueError, TypeError, IndexError, ArithmeticError) as e:
        logger.warning(f"Carrier resolution failed, hiding all carriers this frame: {e}")
        out[:] = np.asarray(hidden, dtype=np.float64)
    return out


# ------------------------------------------------------------------------------
# Effect regions and field indicators
# ------------------------------------------------------------------------------
def locate_effect_region(path: CompositePath, kind: SegmentKind) -> tuple[float, float]:
    """
    Progress interval [start, end) of the first segment of the given kind.

    Raises:
        EffectRegionUnavailable: If no such segment exists or the interval is degenerate.
    """
    segment = path.find_segment(kind)
    if segment is None:
        raise EffectRegionUnavailable(f"No '{kind}' segment in the circuit path.")

    start, end = path.progress_interval(segment)
    if not (math.isfinite(start) and math.isfinite(end)) or end <= start:
        raise EffectRegionUnavailable(f"Degenerate '{kind}' progress interval [{start}, {end}).")
    return start, end


def induced_field_indicators(
    path: CompositePath,
    state: CircuitState,
    params: CircuitParameters,
    count: int,
    offset: float = 0.12,
    kind: SegmentKind = SegmentKind.INDUCTOR
) -> tuple[FieldIndicator, ...]:
    """
    Induced electric field arrows spread evenly over the inductor winding.

    Arrows point along the winding against the change of current and are
    pushed ``offset`` away from the winding along the local z direction.
    Returns an empty tuple when the field is too weak or the inductor region
    is unavailable.
    """
    vl_normalized = min(1.0, abs(state.Vl) / max(0.1, abs(params.initial_charge / params.capacitance)))
    if count <= 0 or vl_normalized <= E_FIELD_VISIBILITY_THRESHOLD:
        return ()

    try:
        start, end = locate_effect_region(path, kind)
    except EffectRegionUnavailable as e:
        logger.warning(f"Induced field suppressed: {e}")
        return ()

    sign = -math.copysign(1.0, state.dIdt) if state.dIdt != 0.0 else 0.0
    progresses = start + (np.arange(count) / count) * (end - start)
    points = path.point_at_progress(progresses)
    tangents = path.tangent_at_progress(progresses)

    outward = np.zeros_like(points)
    outward[:, 2] = np.sign(points[:, 2])

    indicators = []
    for point, tangent, push in zip(points, tangents, outward):
        indicators.append(FieldIndicator(
            anchor=_as_tuple(point + offset * push),
            direction=_as_tuple(tangent * sign),
            magnitude=vl_normalized
        ))
    return tuple(indicators)


def magnetic_field_indicator(
    path: CompositePath,
    state: CircuitState,
    params: CircuitParameters,
    kind: SegmentKind = SegmentKind.INDUCTOR,
    samples: int = 256
) -> Optional[FieldIndicator]:
    """
    Net magnetic field arrow at the centre of the winding.

    The anchor is the centroid of the winding, the direction follows the
    winding axis (start -> end) signed by the current. None when the current
    is too small or the inductor is missing.
    """
    i_normalized = min(1.0, abs(state.I) / max(1e-6, params.peak_current))
    if i_normalized <= B_FIELD_VISIBILITY_THRESHOLD:
        return None

    segment = path.find_segment(kind)
    if segment is None:
        logger.warning(f"Magnetic field suppressed: no '{kind}' segment in the circuit path.")
        return None

    # Midpoint samples: whole turns average out to the axis
    pts = segment.curve.point_at((np.arange(samples) + 0.5) / samples)
    centroid = pts.mean(axis=0)
    chord = segment.curve.point_at(1.0) - segment.curve.point_at(0.0)
    norm = np.linalg.norm(chord)
    if norm == 0.0:
        return None

    sign = 1.0 if state.I >= 0 else -1.0
    return FieldIndicator(
        anchor=_as_tuple(centroid),
        direction=_as_tuple(sign * chord / norm),
        magnitude=i_normalized
    )
