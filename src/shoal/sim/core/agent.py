from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import Optional

from pygame.math import Vector3

PLAYER_GROUP = 0


class AgentKind(str, Enum):
    NPC = "Npc"
    PLAYER = "Player"


class Capability(Flag):
    NONE = 0
    FORCEABLE = auto()
    FRICTION = auto()
    COHESION = auto()
    SEPARATION = auto()
    ALIGNMENT = auto()
    WANDER = auto()
    STEERABLE = auto()
    GROUPABLE = auto()
    TRACKED = auto()
    TRACKED_ZOOM_ONLY = auto()


NPC_CAPABILITIES = (
    Capability.FORCEABLE
    | Capability.FRICTION
    | Capability.COHESION
    | Capability.SEPARATION
    | Capability.ALIGNMENT
    | Capability.WANDER
    | Capability.GROUPABLE
)

# The player feeds cohesion/alignment/separation into its neighbours but is only moved by steering.
PLAYER_CAPABILITIES = (
    Capability.COHESION
    | Capability.SEPARATION
    | Capability.ALIGNMENT
    | Capability.STEERABLE
    | Capability.GROUPABLE
    | Capability.TRACKED
)


@dataclass(slots=True)
class Agent:
    id: int
    kind: AgentKind
    position: Vector3
    velocity: Vector3 = field(default_factory=Vector3)
    forward: Vector3 = field(default_factory=lambda: Vector3(0.0, 1.0, 0.0))
    up: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 1.0))
    group_id: Optional[int] = None
    capabilities: Capability = NPC_CAPABILITIES
    cohesion_force: Vector3 = field(default_factory=Vector3)
    separation_force: Vector3 = field(default_factory=Vector3)
    alignment_force: Vector3 = field(default_factory=Vector3)
    friction_force: Vector3 = field(default_factory=Vector3)
    wander_force: Vector3 = field(default_factory=Vector3)

    @property
    def is_player(self) -> bool:
        return self.kind is AgentKind.PLAYER

    @property
    def grouped(self) -> bool:
        return self.group_id is not None

    def is_grouped_with_player(self) -> bool:
        return self.group_id == PLAYER_GROUP

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def enabled_force(self) -> Vector3:
        total = Vector3()
        if Capability.COHESION in self.capabilities:
            total += self.cohesion_force
        if Capability.SEPARATION in self.capabilities:
            total += self.separation_force
        if Capability.ALIGNMENT in self.capabilities:
            total += self.alignment_force
        if Capability.FRICTION in self.capabilities:
            total += self.friction_force
        if Capability.WANDER in self.capabilities:
            total += self.wander_force
        return total

    @property
    def animation_speed(self) -> float:
        return 1.0 + self.velocity.length()


def new_npc(agent_id: int, position: Vector3, forward: Vector3 | None = None) -> Agent:
    agent = Agent(id=agent_id, kind=AgentKind.NPC, position=Vector3(position))
    if forward is not None:
        agent.forward = Vector3(forward)
    return agent


def new_player(agent_id: int, position: Vector3 | None = None) -> Agent:
    return Agent(
        id=agent_id,
        kind=AgentKind.PLAYER,
        position=Vector3(position) if position is not None else Vector3(),
        group_id=PLAYER_GROUP,
        capabilities=PLAYER_CAPABILITIES,
    )
