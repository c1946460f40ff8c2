from __future__ import annotations

from pygame.math import Vector3
from pytest import approx

from shoal.sim.core.agent import Capability, new_npc, new_player
from shoal.sim.core.config import CameraConfig
from shoal.sim.systems.camera import CameraRig, frame, framing_target, track_player_group


def test_target_centers_on_tracked_and_respects_min_distance():
    config = CameraConfig()
    target = framing_target([Vector3(2.0, 4.0, 0.0), Vector3(4.0, 8.0, 0.0)], [], config)

    assert tuple(target) == approx((3.0, 6.0, 50.0))


def test_target_pulls_back_with_spread():
    config = CameraConfig(min_distance=1.0, distance_scale=2.0, zoom=1.5)
    points = [Vector3(-10.0, 0.0, 0.0), Vector3(10.0, 0.0, 0.0)]

    target = framing_target(points, points, config)

    assert tuple(target) == approx((0.0, 0.0, 30.0))


def test_empty_tracked_set_holds_camera():
    config = CameraConfig()
    camera = CameraRig(position=Vector3(1.0, 2.0, 3.0))
    npc = new_npc(1, Vector3(50.0, 0.0, 0.0))

    assert framing_target([], [Vector3()], config) is None
    frame(camera, [npc], config)

    assert tuple(camera.position) == (1.0, 2.0, 3.0)
    assert camera.target is None


def test_camera_eases_toward_target():
    config = CameraConfig(blend=0.5, min_distance=50.0)
    camera = CameraRig(position=Vector3(0.0, 0.0, 20.0))
    player = new_player(0, Vector3(10.0, -4.0, 0.0))

    frame(camera, [player], config)
    assert tuple(camera.position) == approx((5.0, -2.0, 35.0))

    frame(camera, [player], config)
    assert tuple(camera.position) == approx((7.5, -3.0, 42.5))
    assert tuple(camera.target) == approx((10.0, -4.0, 50.0))


def test_zoom_only_agents_widen_without_moving_center():
    config = CameraConfig(blend=1.0, min_distance=0.0, distance_scale=1.0)
    camera = CameraRig(position=Vector3())
    player = new_player(0)
    follower = new_npc(1, Vector3(0.0, 12.0, 0.0))
    follower.capabilities |= Capability.TRACKED_ZOOM_ONLY

    frame(camera, [player, follower], config)

    assert tuple(camera.position) == approx((0.0, 0.0, 12.0))


def test_track_player_group_marks_new_members_once():
    player = new_player(0)
    member = new_npc(1, Vector3())
    member.group_id = 0
    stranger = new_npc(2, Vector3())
    stranger.group_id = 4

    assert track_player_group([player, member, stranger]) == 1
    assert member.has(Capability.TRACKED_ZOOM_ONLY)
    assert not stranger.has(Capability.TRACKED_ZOOM_ONLY)
    assert not player.has(Capability.TRACKED_ZOOM_ONLY)
    assert track_player_group([player, member, stranger]) == 0


def test_center_on_group_uses_player_group_centroid():
    config = CameraConfig(blend=1.0, min_distance=0.0, distance_scale=1.0, center_on_group=True)
    camera = CameraRig(position=Vector3())
    player = new_player(0)
    follower = new_npc(1, Vector3(8.0, 0.0, 0.0))
    follower.group_id = 0
    track_player_group([player, follower])

    frame(camera, [player, follower], config)

    assert tuple(camera.position) == approx((4.0, 0.0, 4.0))
