from __future__ import annotations

from typing import Sequence

from pygame.math import Vector3

from ..core.agent import Agent, Capability
from ..utils.math3d import EPSILON, _clamp_length


def ray_plane_target(origin: Vector3, direction: Vector3, plane_z: float = 0.0) -> Vector3 | None:
    """Point where a pointer ray meets the plane ``z = plane_z``; ``None`` when the ray runs parallel to it."""
    if abs(direction.z) <= EPSILON:
        return None
    t = (plane_z - origin.z) / direction.z
    return origin + direction * t


def steer(agents: Sequence[Agent], target: Vector3 | None, max_speed: float) -> None:
    """Point every steerable agent at ``target``, or stop it when there is no target."""
    for agent in agents:
        if Capability.STEERABLE not in agent.capabilities:
            continue
        if target is None:
            agent.velocity = Vector3()
            continue
        delta = target - agent.position
        delta.z = 0.0
        agent.velocity = _clamp_length(delta, max_speed)
