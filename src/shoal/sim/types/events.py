from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ContactStarted:
    first: int
    second: int


@dataclass(frozen=True, slots=True)
class GroupsMerged:
    first: int
    second: int


@dataclass(frozen=True, slots=True)
class JoinedPlayerGroup:
    agent_id: int
