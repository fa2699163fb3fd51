"""Pure 3-vector helpers.

Vectors are plain ``(x, y, z)`` float tuples. Nothing here allocates numpy
arrays: the traversal loop calls these per ray and small tuples are
faster than array construction at this size.
"""

import math
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]


def as_vec3(v: Sequence[float]) -> Vec3:
    return (float(v[0]), float(v[1]), float(v[2]))


def add(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def subtract(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(v: Sequence[float], s: float) -> Vec3:
    return (v[0] * s, v[1] * s, v[2] * s)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(v: Sequence[float]) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return length(subtract(a, b))


def normalize(v: Sequence[float]) -> Vec3:
    """Unit vector along *v*. The zero vector maps to itself."""
    n = length(v)
    if n == 0:
        return (0.0, 0.0, 0.0)
    return (v[0] / n, v[1] / n, v[2] / n)


def rotate_vector_y(v: Sequence[float], angle: float) -> Vec3:
    """Rotate *v* about the vertical (Y) axis by *angle* radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (v[0] * c - v[2] * s, v[1], v[0] * s + v[2] * c)
