"""
Three-component single precision vector.

Components are rounded to float32 on construction so that values held in
memory match what a binary STL record can carry. Arithmetic that feeds
accumulations (dot) is done in double precision.
"""

import math
from dataclasses import dataclass
from typing import Iterator

import numpy as np
from numpy.typing import NDArray


def _f32(value: float) -> float:
    return float(np.float32(value))


@dataclass(frozen=True)
class Vec3:
    """Immutable 3D vector (x, y, z) with float32 components."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, 'x', _f32(self.x))
        object.__setattr__(self, 'y', _f32(self.y))
        object.__setattr__(self, 'z', _f32(self.z))

    @classmethod
    def from_iterable(cls, values) -> 'Vec3':
        """Build from any 3-item sequence or array."""
        x, y, z = values
        return cls(float(x), float(y), float(z))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __sub__(self, other: 'Vec3') -> 'Vec3':
        return diff(self, other)

    def __neg__(self) -> 'Vec3':
        return Vec3(-self.x, -self.y, -self.z)

    def cross(self, other: 'Vec3') -> 'Vec3':
        return cross(self, other)

    def dot(self, other: 'Vec3') -> float:
        return dot(self, other)

    def length(self) -> float:
        """Euclidean norm, in double precision."""
        return math.sqrt(dot(self, self))

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def to_array(self) -> NDArray[np.float32]:
        return np.array([self.x, self.y, self.z], dtype=np.float32)


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Right-handed cross product a x b."""
    return Vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def dot(a: Vec3, b: Vec3) -> float:
    """Dot product, accumulated as a Python (double precision) float."""
    return a.x * b.x + a.y * b.y + a.z * b.z


def diff(a: Vec3, b: Vec3) -> Vec3:
    """Component-wise difference a - b."""
    return Vec3(a.x - b.x, a.y - b.y, a.z - b.z)


ZERO = Vec3(0.0, 0.0, 0.0)
