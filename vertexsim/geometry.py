"""Points, hits, straight tracks and cylindrical detector surfaces."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Point:
    """A point in the laboratory frame (cm)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Hit:
    """A detector hit: longitudinal coordinate, azimuth and a label.

    The label is the index of the particle on its layer, or -1 for noise.
    """

    z: float = 0.0
    phi: float = 0.0
    label: int = 0


def _clamped_acos(value: float) -> float:
    return math.acos(max(-1.0, min(1.0, value)))


class Line:
    """A straight track starting at ``point`` with polar and azimuthal angles.

    ``parameter`` is the distance travelled along the direction cosines; it is
    set by :meth:`Cylinder.intersect` and used by :meth:`position`.
    """

    def __init__(self, point: Point, theta: float, phi: float) -> None:
        self.point = point
        self.parameter = 0.0
        self.theta = 0.0
        self.phi = 0.0
        self.cosines: tuple[float, float, float] = (0.0, 0.0, 0.0)
        self.update_direction(theta, phi)

    @classmethod
    def from_cosines(cls, point: Point, cosines: Sequence[float]) -> "Line":
        """Build a line from its three direction cosines."""
        line = cls(point, 0.0, 0.0)
        line.set_cosines(cosines)
        return line

    @property
    def direction(self) -> tuple[float, float]:
        """The pair (theta, phi)."""
        return self.theta, self.phi

    def update_direction(self, theta: float, phi: float) -> None:
        """Set the angles and recompute the direction cosines."""
        self.theta = float(theta)
        self.phi = float(phi)
        sin_theta = math.sin(self.theta)
        self.cosines = (
            sin_theta * math.cos(self.phi),
            sin_theta * math.sin(self.phi),
            math.cos(self.theta),
        )

    def set_cosines(self, cosines: Sequence[float]) -> None:
        """Set the direction cosines and recompute the angles.

        The azimuth is brought into [0, 2*pi).
        """
        values = tuple(float(c) for c in cosines)
        if len(values) != 3:
            raise ValueError("exactly three direction cosines are required")
        self.cosines = values  # type: ignore[assignment]
        cx, cy, cz = values
        self.theta = _clamped_acos(cz)
        phi = math.atan2(cy, cx)
        if cy < 0.0:
            phi += 2.0 * math.pi
        self.phi = phi

    def position(self) -> Point:
        """The point reached at the current parameter."""
        cx, cy, cz = self.cosines
        t = self.parameter
        return Point(
            self.point.x + cx * t,
            self.point.y + cy * t,
            self.point.z + cz * t,
        )

    def __repr__(self) -> str:
        return (
            f"Line(point={self.point!r}, theta={self.theta!r}, "
            f"phi={self.phi!r}, parameter={self.parameter!r})"
        )


@dataclass(frozen=True)
class Cylinder:
    """A cylinder coaxial with the beam, centred on z = 0 (cm)."""

    radius: float = 0.0
    height: float = 0.0

    def intersect(self, line: Line) -> tuple[Point, bool]:
        """Intersect ``line`` with the cylinder surface.

        Returns the pair (point, hit). The line's parameter is moved to the
        crossing. When the line misses the surface or starts outside it, the
        point is the origin and ``hit`` is False. When the crossing lies
        beyond the cylinder's length, the crossing point is returned with
        ``hit`` False.
        """
        cx, cy, _ = line.cosines
        p0 = line.point
        a = cx * cx + cy * cy
        b = p0.x * cx + p0.y * cy
        c = p0.x * p0.x + p0.y * p0.y - self.radius * self.radius
        discriminant = b * b - a * c
        if discriminant < 0.0 or a == 0.0:
            return Point(), False

        root = math.sqrt(discriminant)
        t1 = (-b - root) / a
        t2 = (-b + root) / a
        if t1 * t2 > 0.0:
            return Point(), False

        line.parameter = t2 if t2 > 0.0 else t1
        crossing = line.position()
        half = self.height / 2.0
        return crossing, -half <= crossing.z <= half