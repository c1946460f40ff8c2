from __future__ import annotations

import math

from pygame.math import Vector3

# Single-precision machine epsilon; positions closer than this are treated as coincident.
EPSILON = 1.1920929e-07

WORLD_UP = Vector3(0.0, 0.0, 1.0)


def _safe_normalize(vector: Vector3, epsilon: float = EPSILON) -> Vector3:
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= epsilon * epsilon:
        return Vector3()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector3(vector.x * inv, vector.y * inv, vector.z * inv)


def _clamp_length(vector: Vector3, max_length: float) -> Vector3:
    if max_length <= 0:
        return Vector3()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return Vector3(vector)
    inv = max_length / math.sqrt(magnitude_sq)
    return Vector3(vector.x * inv, vector.y * inv, vector.z * inv)


def _lerp(current: Vector3, target: Vector3, t: float) -> Vector3:
    return Vector3(
        current.x + (target.x - current.x) * t,
        current.y + (target.y - current.y) * t,
        current.z + (target.z - current.z) * t,
    )


def _centroid(points: list[Vector3]) -> Vector3 | None:
    if not points:
        return None
    sum_x = 0.0
    sum_y = 0.0
    sum_z = 0.0
    for point in points:
        sum_x += point.x
        sum_y += point.y
        sum_z += point.z
    inv = 1.0 / len(points)
    return Vector3(sum_x * inv, sum_y * inv, sum_z * inv)


def _look_basis(
    forward: Vector3, up_hint: Vector3 = WORLD_UP, fallback_up: Vector3 | None = None
) -> tuple[Vector3, Vector3] | None:
    """Return an orthonormal ``(forward, up)`` pair facing ``forward``.

    ``None`` when ``forward`` is degenerate. When ``forward`` is parallel to
    ``up_hint`` the ``fallback_up`` (typically the previous up axis) is used.
    """
    direction = _safe_normalize(forward)
    if direction.length_squared() == 0.0:
        return None
    right = direction.cross(up_hint)
    if right.length_squared() <= EPSILON:
        if fallback_up is None:
            return None
        right = direction.cross(fallback_up)
        if right.length_squared() <= EPSILON:
            return None
    right = _safe_normalize(right)
    up = right.cross(direction)
    return direction, _safe_normalize(up)
