from __future__ import annotations

from pygame.math import Vector3

from shoal.sim.core.agent import (
    NPC_CAPABILITIES,
    PLAYER_CAPABILITIES,
    PLAYER_GROUP,
    Agent,
    AgentKind,
    Capability,
    new_npc,
    new_player,
)


def test_agent_uses_slots_and_isolates_defaults():
    agent_a = new_npc(1, Vector3(1.0, 2.0, 0.0))
    agent_b = new_npc(2, Vector3())

    assert not hasattr(agent_a, "__dict__")
    assert hasattr(Agent, "__slots__")
    assert agent_a.velocity is not agent_b.velocity
    agent_a.velocity.x = 3.0
    assert agent_b.velocity.x == 0.0


def test_npc_starts_ungrouped_with_all_forces():
    agent = new_npc(3, Vector3(4.0, 0.0, 0.0), forward=Vector3(1.0, 0.0, 0.0))

    assert agent.kind is AgentKind.NPC
    assert agent.group_id is None
    assert not agent.grouped
    assert agent.capabilities == NPC_CAPABILITIES
    assert tuple(agent.forward) == (1.0, 0.0, 0.0)
    for capability in (
        Capability.FORCEABLE,
        Capability.FRICTION,
        Capability.COHESION,
        Capability.SEPARATION,
        Capability.ALIGNMENT,
        Capability.WANDER,
    ):
        assert agent.has(capability)


def test_player_holds_reserved_group_and_never_wanders():
    player = new_player(0)

    assert player.is_player
    assert player.group_id == PLAYER_GROUP
    assert player.is_grouped_with_player()
    assert player.capabilities == PLAYER_CAPABILITIES
    assert not player.has(Capability.WANDER)
    assert not player.has(Capability.FORCEABLE)
    assert player.has(Capability.TRACKED)
    assert tuple(player.position) == (0.0, 0.0, 0.0)


def test_enabled_force_sums_only_held_capabilities():
    agent = new_npc(1, Vector3())
    agent.capabilities = Capability.FORCEABLE | Capability.COHESION | Capability.FRICTION
    agent.cohesion_force = Vector3(1.0, 0.0, 0.0)
    agent.friction_force = Vector3(0.0, 2.0, 0.0)
    agent.wander_force = Vector3(100.0, 100.0, 100.0)
    agent.separation_force = Vector3(0.0, 0.0, 5.0)

    assert tuple(agent.enabled_force()) == (1.0, 2.0, 0.0)


def test_animation_speed_scales_with_velocity():
    agent = new_npc(1, Vector3())
    assert agent.animation_speed == 1.0
    agent.velocity = Vector3(3.0, 4.0, 0.0)
    assert agent.animation_speed == 6.0
