from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Sequence

from pygame.math import Vector3

from ..core.agent import Agent, Capability
from ..utils.math3d import _centroid, _lerp

if TYPE_CHECKING:
    from ..core.config import CameraConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CameraRig:
    position: Vector3
    forward: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, -1.0))
    target: Vector3 | None = None


def framing_target(
    centered: Sequence[Vector3], zoomed: Sequence[Vector3], config: CameraConfig
) -> Vector3 | None:
    """Viewpoint that keeps ``centered`` in the middle and every point of ``zoomed`` in frame.

    Returns ``None`` when there is nothing to center on.
    """
    center = _centroid(list(centered))
    if center is None:
        return None
    furthest_sq = 0.0
    for point in zoomed:
        furthest_sq = max(furthest_sq, point.distance_squared_to(center))
    furthest = math.sqrt(furthest_sq)
    depth = max(config.zoom * config.distance_scale * furthest, config.min_distance)
    return Vector3(center.x, center.y, depth)


def track_player_group(agents: Sequence[Agent]) -> int:
    """Mark every NPC grouped with the player as zoom-tracked; returns how many were newly marked."""
    marked = 0
    for agent in agents:
        if Capability.TRACKED in agent.capabilities or Capability.TRACKED_ZOOM_ONLY in agent.capabilities:
            continue
        if agent.is_grouped_with_player():
            agent.capabilities |= Capability.TRACKED_ZOOM_ONLY
            marked += 1
    return marked


def frame(camera: CameraRig, agents: Sequence[Agent], config: CameraConfig) -> None:
    centered: List[Vector3] = []
    zoomed: List[Vector3] = []
    for agent in agents:
        if Capability.TRACKED in agent.capabilities:
            centered.append(agent.position)
            zoomed.append(agent.position)
        elif Capability.TRACKED_ZOOM_ONLY in agent.capabilities:
            zoomed.append(agent.position)
            if config.center_on_group:
                centered.append(agent.position)
    target = framing_target(centered, zoomed, config)
    if target is None:
        logger.debug("No tracked agents; camera holds at %s", camera.position)
        return
    camera.target = target
    camera.position = _lerp(camera.position, target, config.blend)
