"""
Geometric Primitives for the circuit path.

Curves are parameterized by arc-length fraction ``u`` in [0, 1] and accept
either a scalar or a numpy array of fractions, so a whole set of charge
carriers can be resolved in one call.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt

    Fraction = Union[float, npt.NDArray[np.float64]]


@dataclass(frozen=True)
class Vector:
    """Direction with magnitude; used to orient the helix."""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_array(cls, arr: npt.ArrayLike) -> Vector:
        x, y, z = np.asarray(arr, dtype=np.float64).reshape(3)
        return cls(float(x), float(y), float(z))

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __sub__(self, other: Vector) -> Vector:
        return Vector.from_array(self.to_array() - other.to_array())

    def __mul__(self, scalar: float) -> Vector:
        return Vector.from_array(self.to_array() * scalar)

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.to_array()))

    def normalize(self) -> Vector:
        """Unit vector; the zero vector is returned unchanged."""
        return Vector.from_array(_normalize_rows(self.to_array()))

    def dot(self, other: Vector) -> float:
        return float(np.dot(self.to_array(), other.to_array()))

    def cross(self, other: Vector) -> Vector:
        return Vector.from_array(np.cross(self.to_array(), other.to_array()))


@dataclass(frozen=True)
class Point:
    """Location in 3D space. Points differ by a Vector and move by one."""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_array(cls, arr: npt.ArrayLike) -> Point:
        x, y, z = np.asarray(arr, dtype=np.float64).reshape(3)
        return cls(float(x), float(y), float(z))

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __add__(self, other: Vector) -> Point:
        if not isinstance(other, Vector):
            raise TypeError(f"Only a Vector can be added to a Point, got {type(other).__name__}.")
        return Point.from_array(self.to_array() + other.to_array())

    def __sub__(self, other: Point) -> Vector:
        if not isinstance(other, Point):
            raise TypeError(f"Only a Point can be subtracted from a Point, got {type(other).__name__}.")
        return Vector.from_array(self.to_array() - other.to_array())

    def distance_to(self, other: Point) -> float:
        return (other - self).magnitude


def _as_fraction(u: Fraction) -> npt.NDArray[np.float64]:
    return np.asarray(u, dtype=np.float64)


def _normalize_rows(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Normalize vectors along the last axis; zero vectors stay zero."""
    norm = np.linalg.norm(v, axis=-1, keepdims=True)
    return np.divide(v, norm, out=np.zeros_like(v), where=norm > 0.0)


class Curve(ABC):
    """
    Abstract base class for a path contributor.

    The composite path only talks to curves through this interface.
    """
    label: Optional[str] = None

    @property
    @abstractmethod
    def length(self) -> float:
        """Arc length of the curve."""

    @abstractmethod
    def point_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        """
        Get the point at an arc-length fraction.

        Args:
            u: Fraction in [0, 1], scalar or array of shape (N,).

        Returns:
            Array of shape (3,) for a scalar, (N, 3) for an array input.
        """

    @abstractmethod
    def tangent_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        """Unit tangent at an arc-length fraction; same shapes as ``point_at``."""

    @property
    def start(self) -> Point:
        return Point.from_array(self.point_at(0.0))

    @property
    def end(self) -> Point:
        return Point.from_array(self.point_at(1.0))

    def discretize(self, max_length: Optional[float] = None) -> npt.NDArray[np.float64]:
        """Sample the curve into an (N, 3) array including both end points."""
        if max_length is None:
            resolution = 2
        else:
            resolution = max(2, math.ceil(self.length / max_length) + 1)
        return self.point_at(np.linspace(0.0, 1.0, resolution))


@dataclass
class Line(Curve):
    """Straight wire between two points; the fraction runs from start to end."""
    start_point: Point
    end_point: Point
    label: Optional[str] = None

    def to_vector(self) -> Vector:
        return self.end_point - self.start_point

    @property
    def length(self) -> float:
        return self.start_point.distance_to(self.end_point)

    def point_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        u = _as_fraction(u)
        p_s = self.start_point.to_array()
        p_e = self.end_point.to_array()
        return p_s + u[..., None] * (p_e - p_s)

    def tangent_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        u = _as_fraction(u)
        direction = self.to_vector().normalize().to_array()
        return np.broadcast_to(direction, u.shape + (3,)).copy()


@dataclass
class Helix(Curve):
    """
    A uniform-pitch winding around a straight axis.

    The winding starts at ``center - axis * span / 2`` offset by ``radius``
    along ``reference`` and advances ``turns`` full revolutions while moving
    ``span`` along the axis. The speed along the curve is constant, so the
    parametric fraction is also the arc-length fraction.
    """
    center: Point
    axis: Vector
    radius: float
    span: float
    turns: float
    reference: Vector = field(default_factory=lambda: Vector(0.0, 1.0, 0.0))
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.axis.magnitude == 0.0:
            raise ValueError("Helix axis must not be a zero vector.")
        if self.radius < 0.0 or self.span < 0.0 or self.turns < 0.0:
            raise ValueError("Helix radius, span and turns must not be negative.")

        a = self.axis.normalize()
        # Gram-Schmidt: radial reference perpendicular to the axis
        e1 = (self.reference - a * self.reference.dot(a)).normalize()
        if e1.magnitude == 0.0:
            raise ValueError("Helix reference direction must not be parallel to the axis.")
        self._a = a.to_array()
        self._e1 = e1.to_array()
        self._e2 = a.cross(e1).to_array()

    @property
    def total_angle(self) -> float:
        return 2.0 * math.pi * self.turns

    @property
    def length(self) -> float:
        return math.hypot(self.span, self.radius * self.total_angle)

    def axis_point_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        """Point on the winding axis at the same axial progress as ``point_at(u)``."""
        u = _as_fraction(u)
        origin = self.center.to_array() - self._a * self.span / 2.0
        return origin + u[..., None] * (self.span * self._a)

    def point_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        u = _as_fraction(u)
        angle = self.total_angle * u[..., None]
        radial = np.cos(angle) * self._e1 + np.sin(angle) * self._e2
        return self.axis_point_at(u) + self.radius * radial

    def tangent_at(self, u: Fraction) -> npt.NDArray[np.float64]:
        u = _as_fraction(u)
        angle = self.total_angle * u[..., None]
        swirl = -np.sin(angle) * self._e1 + np.cos(angle) * self._e2
        derivative = self.span * self._a + (self.radius * self.total_angle) * swirl
        return _normalize_rows(derivative)
