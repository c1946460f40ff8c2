from __future__ import annotations

from pygame.math import Vector3
from pytest import approx

from shoal.sim.core.agent import new_npc, new_player
from shoal.sim.systems.steering import ray_plane_target, steer


def test_steer_toward_target_in_plane():
    player = new_player(0, Vector3(1.0, 1.0, 0.0))

    steer([player], Vector3(4.0, 5.0, 7.0), max_speed=20.0)

    assert tuple(player.velocity) == approx((3.0, 4.0, 0.0))


def test_steer_clamps_to_max_speed():
    player = new_player(0)

    steer([player], Vector3(300.0, 400.0, 0.0), max_speed=20.0)

    assert tuple(player.velocity) == approx((12.0, 16.0, 0.0))


def test_no_target_stops_the_player():
    player = new_player(0)
    player.velocity = Vector3(5.0, 0.0, 0.0)

    steer([player], None, max_speed=20.0)

    assert player.velocity.length() == 0.0


def test_only_steerable_agents_are_driven():
    npc = new_npc(1, Vector3())
    npc.velocity = Vector3(2.0, 0.0, 0.0)

    steer([npc], None, max_speed=20.0)

    assert tuple(npc.velocity) == (2.0, 0.0, 0.0)


def test_ray_hits_depth_plane():
    target = ray_plane_target(Vector3(0.0, 0.0, 20.0), Vector3(1.0, 2.0, -4.0))
    assert tuple(target) == approx((5.0, 10.0, 0.0))

    raised = ray_plane_target(Vector3(0.0, 0.0, 20.0), Vector3(0.0, 0.0, -1.0), plane_z=5.0)
    assert tuple(raised) == approx((0.0, 0.0, 5.0))


def test_parallel_ray_has_no_target():
    assert ray_plane_target(Vector3(0.0, 0.0, 20.0), Vector3(1.0, 0.0, 0.0)) is None
