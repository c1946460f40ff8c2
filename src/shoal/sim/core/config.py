from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

PROXIMITY_MODES = ("distance", "collision")


@dataclass
class ForceConfig:
    max_speed: float = 20.0
    friction_coefficient: float = 0.01
    cohesion_strength: float = 0.5
    alignment_strength: float = 0.3
    separation_strength: float = 50.0
    separation_radius: float = 2.0
    wander_strength: float = 15.0
    # Cohesion/alignment per group centroid instead of the global flock.
    group_aware: bool = True
    wander_ungrouped_only: bool = True
    epsilon: float = 1.1920929e-07

    @staticmethod
    def preset(name: str) -> "ForceConfig":
        try:
            values = FORCE_PRESETS[name]
        except KeyError:
            raise ValueError(f"Unknown force preset: {name}") from None
        return ForceConfig(**values)


FORCE_PRESETS: Dict[str, Dict[str, Any]] = {
    "global": {
        "cohesion_strength": 0.75,
        "alignment_strength": 0.1,
        "wander_strength": 0.0,
        "group_aware": False,
        "wander_ungrouped_only": False,
    },
    "grouped": {
        "cohesion_strength": 0.5,
        "alignment_strength": 0.3,
        "wander_strength": 15.0,
        "group_aware": True,
        "wander_ungrouped_only": True,
    },
}


@dataclass
class GroupingConfig:
    enabled: bool = True
    group_distance: float = 10.0
    proximity_mode: str = "distance"
    first_group_id: int = 1


@dataclass
class CameraConfig:
    distance_scale: float = 2.44948974278
    zoom: float = 1.0
    min_distance: float = 50.0
    blend: float = 0.5
    initial_position: tuple[float, float, float] = (0.0, 0.0, 20.0)
    # Center on the whole player group instead of the player alone.
    center_on_group: bool = False


@dataclass
class SteeringConfig:
    max_speed: float = 20.0
    plane_z: float = 0.0


@dataclass
class SpawnConfig:
    npc_count: int = 40
    spawn_radius: float = 30.0


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    seed: int = 42
    config_version: str = "v1"
    forces: ForceConfig = field(default_factory=ForceConfig)
    grouping: GroupingConfig = field(default_factory=GroupingConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)

    def __post_init__(self) -> None:
        validate_config(self)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def with_preset(self, name: str) -> "SimulationConfig":
        return replace(self, forces=ForceConfig.preset(name))


def validate_config(config: SimulationConfig) -> None:
    forces = config.forces
    if forces.max_speed < 0.0:
        raise ValueError(f"forces.max_speed must be non-negative, got {forces.max_speed}")
    if forces.separation_radius <= 0.0:
        raise ValueError(f"forces.separation_radius must be positive, got {forces.separation_radius}")
    if config.grouping.proximity_mode not in PROXIMITY_MODES:
        raise ValueError(
            f"Unknown proximity mode: {config.grouping.proximity_mode} (expected one of {PROXIMITY_MODES})"
        )
    if config.grouping.first_group_id < 1:
        raise ValueError("grouping.first_group_id must be >= 1; 0 is reserved for the player group")
    if not 0.0 <= config.camera.blend <= 1.0:
        raise ValueError(f"camera.blend must be within [0, 1], got {config.camera.blend}")


def _known(cls: type, raw: Dict[str, Any], section: str) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - names)
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    return dict(raw)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    # A bare `name:` key in YAML loads as None and means "all defaults".
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return dict(value)


def _triple(value: Any, default: tuple[float, float, float]) -> tuple[float, float, float]:
    if isinstance(value, (tuple, list)) and len(value) == 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    return default


def load_config(raw: dict) -> SimulationConfig:
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(raw).__name__}")
    forces_raw = _section(raw, "forces")
    preset = forces_raw.pop("preset", None)
    base_forces = ForceConfig.preset(preset) if preset is not None else ForceConfig()
    forces = replace(base_forces, **_known(ForceConfig, forces_raw, "forces"))

    grouping = GroupingConfig(**_known(GroupingConfig, _section(raw, "grouping"), "grouping"))
    camera_raw = _known(CameraConfig, _section(raw, "camera"), "camera")
    default_camera = CameraConfig()
    camera_raw["initial_position"] = _triple(camera_raw.get("initial_position"), default_camera.initial_position)
    camera = CameraConfig(**camera_raw)
    steering = SteeringConfig(**_known(SteeringConfig, _section(raw, "steering"), "steering"))
    spawn = SpawnConfig(**_known(SpawnConfig, _section(raw, "spawn"), "spawn"))

    sections = {"forces", "grouping", "camera", "steering", "spawn"}
    sim_values = {k: v for k, v in raw.items() if k not in sections}
    return SimulationConfig(
        forces=forces,
        grouping=grouping,
        camera=camera,
        steering=steering,
        spawn=spawn,
        **_known(SimulationConfig, sim_values, "simulation"),
    )
