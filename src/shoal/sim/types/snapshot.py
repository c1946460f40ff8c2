from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    agents: List[Dict[str, Any]]
    camera: "SnapshotCamera"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotCamera:
    position: List[float]
    forward: List[float]


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str
    proximity_mode: str
