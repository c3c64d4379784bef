"""
Composite Circuit Path
======================
Joins heterogeneous curves (straight links and the inductor winding) into one
closed, arc-length parameterized loop.

Why is this file needed?
------------------------
1. Kinematics: Charge carriers live on a scalar "progress" in [0, 1). This
   module turns progress into 3D points and tangents.
2. Effect placement: Segments carry a semantic kind, so visual effects can be
   anchored to a physical element (e.g. the inductor) instead of a fixed point.

Classes:
    SegmentKind: Semantic role of a segment.
    SegmentSpec: One input entry for ``build_path``.
    PathSegment: One indexed contributor of the built path.
    CompositePath: The ordered segments with progress queries.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
import math
from typing import Iterable, Iterator, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from lcresonance.config import ZERO_LENGTH_EPSILON
from lcresonance.exceptions import DegeneratePathError
from lcresonance.model.geometry_primitives import Curve

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class SegmentKind(StrEnum):
    """Semantic role of a path segment, independent of its geometric type."""
    WIRE = "wire"
    INDUCTOR = "inductor"
    CAPACITOR_GAP = "capacitor gap"
    CAPACITOR_PLATE = "capacitor plate"


@dataclass(frozen=True)
class SegmentSpec:
    """
    Input for ``build_path``.

    ``droppable`` segments shorter than the zero-length epsilon are removed
    before indexing; they only exist to fix up a curve origin.
    """
    kind: SegmentKind
    curve: Curve
    droppable: bool = True

    @property
    def name(self) -> str:
        """The curve label if it has one, otherwise the kind."""
        return f"'{self.curve.label or self.kind}'"


@dataclass(frozen=True)
class PathSegment:
    kind: SegmentKind
    curve: Curve
    length: float
    cumulative_length: float

    @property
    def start_length(self) -> float:
        return self.cumulative_length - self.length


class CompositePath:
    """
    An ordered, immutable sequence of segments forming the circuit loop.

    Progress 0 -> 1 traces the loop once in the direction of positive current.
    Use ``build_path`` to construct one.
    """

    def __init__(self, segments: Sequence[PathSegment]) -> None:
        self._segments: tuple[PathSegment, ...] = tuple(segments)
        if not self._segments:
            raise DegeneratePathError("Circuit path has no segments.")

        self._lengths = np.array([seg.length for seg in self._segments], dtype=np.float64)
        self._cumulative = np.array([seg.cumulative_length for seg in self._segments], dtype=np.float64)
        self.total_length: float = float(self._cumulative[-1])

        if not (math.isfinite(self.total_length) and self.total_length > 0.0):
            raise DegeneratePathError(f"Circuit path length must be positive, got {self.total_length}.")

    @property
    def segments(self) -> tuple[PathSegment, ...]:
        return self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[PathSegment]:
        return iter(self._segments)

    # ------------------------------------------------------------------
    # Progress lookup
    # ------------------------------------------------------------------
    def _locate(
        self,
        progress: Union[float, npt.NDArray[np.float64]]
    ) -> tuple[npt.NDArray[np.int64], npt.NDArray[np.float64]]:
        """
        Map progress to (segment index, local fraction).

        The owning segment is the first whose cumulative length is >= s.
        """
        p = np.asarray(progress, dtype=np.float64)
        if not np.all(np.isfinite(p)):
            raise ValueError("Progress must be finite.")

        s = np.clip(p, 0.0, 1.0) * self.total_length
        idx = np.searchsorted(self._cumulative, s, side="left")
        # s can overshoot the last cumulative length by rounding
        idx = np.minimum(idx, len(self._segments) - 1)

        start = self._cumulative[idx] - self._lengths[idx]
        local = np.clip((s - start) / self._lengths[idx], 0.0, 1.0)
        return idx, local

    def _evaluate(self, progress: Union[float, npt.NDArray[np.float64]], tangent: bool) -> npt.NDArray[np.float64]:
        idx, local = self._locate(progress)
        if idx.ndim == 0:
            curve = self._segments[int(idx)].curve
            return curve.tangent_at(float(local)) if tangent else curve.point_at(float(local))

        out = np.empty(idx.shape + (3,), dtype=np.float64)
        for i in np.unique(idx):
            mask = idx == i
            curve = self._segments[int(i)].curve
            out[mask] = curve.tangent_at(local[mask]) if tangent else curve.point_at(local[mask])
        return out

    def point_at_progress(self, progress: Union[float, npt.NDArray[np.float64]]) -> npt.NDArray[np.float64]:
        """
        Get the point at a fractional position along the whole loop.

        Args:
            progress: Value in [0, 1] (scalar or array of shape (N,)).

        Returns:
            Array of shape (3,) or (N, 3).

        Raises:
            ValueError: If any progress value is not finite.
        """
        return self._evaluate(progress, tangent=False)

    def tangent_at_progress(self, progress: Union[float, npt.NDArray[np.float64]]) -> npt.NDArray[np.float64]:
        """Unit direction of travel at a progress value; same shapes as ``point_at_progress``."""
        return self._evaluate(progress, tangent=True)

    def segment_indices(self, progress: Union[float, npt.NDArray[np.float64]]) -> npt.NDArray[np.int64]:
        """Index of the owning segment for each progress value."""
        idx, _ = self._locate(progress)
        return idx

    def segment_at_progress(self, progress: float) -> PathSegment:
        return self._segments[int(self.segment_indices(progress))]

    # ------------------------------------------------------------------
    # Semantic lookup
    # ------------------------------------------------------------------
    def find_segment(self, kind: SegmentKind) -> Optional[PathSegment]:
        """Return the first segment of the given kind, or None if there is none."""
        for segment in self._segments:
            if segment.kind == kind:
                return segment
        return None

    def progress_interval(self, segment: PathSegment) -> tuple[float, float]:
        """Progress bounds [start, end) covered by a segment."""
        return segment.start_length / self.total_length, segment.cumulative_length / self.total_length

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------
    def is_closed(self, tol: float = 1e-9) -> bool:
        """True if the loop ends where it starts."""
        first = self._segments[0].curve.start
        last = self._segments[-1].curve.end
        return first.distance_to(last) <= tol

    def discretize(self, max_length: Optional[float] = None) -> npt.NDArray[np.float64]:
        """
        Converts the segments into a dense (N, 3) array of points along the loop.
        """
        points_list = []
        for segment in self._segments:
            pts = segment.curve.discretize(max_length=max_length)
            # Skip the last point to avoid duplicates with the next segment's start point
            points_list.append(pts[:-1])

        # Add the final point of the loop
        points_list.append(self._segments[-1].curve.discretize(max_length=max_length)[-1:])
        return np.vstack(points_list)


SegmentEntry = Union[SegmentSpec, tuple]


def build_path(entries: Iterable[SegmentEntry], epsilon: float = ZERO_LENGTH_EPSILON) -> CompositePath:
    """
    Build a composite path from curves given in traversal order.

    Args:
        entries: ``SegmentSpec`` items or ``(kind, curve[, droppable])`` tuples,
            ordered along the direction of positive current.
        epsilon: Droppable segments shorter than this are discarded.

    Returns:
        The indexed ``CompositePath``.

    Raises:
        DegeneratePathError: If no segment remains or the total length is not positive.
    """
    segments: list[PathSegment] = []
    cumulative = 0.0

    for entry in entries:
        spec = entry if isinstance(entry, SegmentSpec) else SegmentSpec(*entry)
        length = spec.curve.length

        if not math.isfinite(length):
            raise DegeneratePathError(f"Segment {spec.name} has a non-finite length.")

        if length < epsilon:
            if spec.droppable:
                logger.debug(f"Dropping zero-length segment {spec.name}.")
                continue
            if length <= 0.0:
                # Kept segments must still advance the cumulative index
                raise DegeneratePathError(f"Non-droppable segment {spec.name} has zero length.")

        cumulative += length
        segments.append(PathSegment(
            kind=spec.kind,
            curve=spec.curve,
            length=length,
            cumulative_length=cumulative
        ))
        logger.debug(f"Segment {len(segments) - 1}: {spec.name}, length {length:.4f}.")

    if not segments:
        raise DegeneratePathError("Circuit path has no segments.")

    path = CompositePath(segments)
    logger.info(f"Circuit path built: {len(path)} segments, total length {path.total_length:.4f}.")
    return path
