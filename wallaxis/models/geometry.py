"""Geometric primitives used throughout the engine."""

from __future__ import annotations
import math
from pydantic import BaseModel, ConfigDict


EPSILON = 1e-6  # Shared tolerance for float comparisons


class Point2D(BaseModel):
    """Point (or free vector) on the floor plan."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    @property
    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def distance_to(self, other: Point2D) -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def midpoint_to(self, other: Point2D) -> Point2D:
        return self.lerp(other, 0.5)

    def lerp(self, other: Point2D, t: float) -> Point2D:
        return Point2D(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t,
        )

    def dot(self, other: Point2D) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Point2D) -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def normalized(self) -> Point2D:
        ln = self.length
        if ln < EPSILON:
            return Point2D(x=0.0, y=0.0)
        return Point2D(x=self.x / ln, y=self.y / ln)

    def perpendicular(self) -> Point2D:
        """90-degree counterclockwise rotation."""
        return Point2D(x=-self.y, y=self.x)

    def __add__(self, other: Point2D) -> Point2D:
        return Point2D(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: Point2D) -> Point2D:
        return Point2D(x=self.x - other.x, y=self.y - other.y)

    def __mul__(self, scalar: float) -> Point2D:
        return Point2D(x=self.x * scalar, y=self.y * scalar)

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f})"


# Directions share the point algebra
Vector2D = Point2D


class Point3D(BaseModel):
    """Point in 3D model space."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    def distance_to(self, other: Point3D) -> float:
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def to_2d(self) -> Point2D:
        return Point2D(x=self.x, y=self.y)


class LineSegment2D(BaseModel):
    """Directed segment from start to end. Equality is by endpoint value."""
    model_config = ConfigDict(frozen=True)

    start: Point2D
    end: Point2D

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        """Direction angle in radians, range (-pi, pi]."""
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)

    @property
    def normalized_angle(self) -> float:
        """Direction-agnostic angle in [0, pi)."""
        return normalize_angle_0_to_pi(self.angle)

    @property
    def midpoint(self) -> Point2D:
        return self.start.midpoint_to(self.end)

    @property
    def direction(self) -> Point2D:
        return (self.end - self.start).normalized()

    @property
    def is_valid(self) -> bool:
        return self.length > EPSILON

    def point_at(self, t: float) -> Point2D:
        return self.start.lerp(self.end, t)


def normalize_angle_0_to_pi(angle: float) -> float:
    """Fold an angle into [0, pi), ignoring direction."""
    a = math.fmod(angle, math.pi)
    if a < 0:
        a += math.pi
    if a >= math.pi:
        a -= math.pi
    return a


def make_segment(x1: float, y1: float, x2: float, y2: float) -> LineSegment2D:
    """Shorthand for building a segment from raw coordinates."""
    return LineSegment2D(start=Point2D(x=x1, y=y1), end=Point2D(x=x2, y=y2))
