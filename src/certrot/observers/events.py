# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single rotation pass
    env: str          # dev/staging/prod
    context: Optional[str]  # kube-context

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, context: Optional[str]) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Rotation pass
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RotationSkipped(BaseEvent):
    cluster: str
    reason: str

@dataclass(frozen=True)
class RotationStarted(BaseEvent):
    cluster: str
    from_generation: int
    to_generation: int
    services: List[str]
    nodes: List[str]

@dataclass(frozen=True)
class RotationCommitted(BaseEvent):
    cluster: str
    generation: int
    duration_ms: int

@dataclass(frozen=True)
class RotationFailed(BaseEvent):
    cluster: str
    generation: int
    error: str
    node: Optional[str] = None


# ---------------------------------------------------------------------
# Per-node lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class NodePlanBuilt(BaseEvent):
    node: str
    shape: str
    checksum: str
    instructions: List[str]

@dataclass(frozen=True)
class NodePlanConverged(BaseEvent):
    node: str
    duration_ms: int

@dataclass(frozen=True)
class NodePlanFailed(BaseEvent):
    node: str
    error: str
