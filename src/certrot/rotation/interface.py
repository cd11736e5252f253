# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
from typing import Protocol

from ..cluster.nodes import Node
from ..cluster.plan import NodePlan
from ..config.models import ControlPlane


class PlanStore(Protocol):
    def assign_and_check(
        self,
        label: str,
        node: Node,
        plan: NodePlan,
        joined_retries: int = 0,
        max_retries: int = 0,
    ) -> None:
        """Deliver *plan* and block until it converged; raise on failure."""
        ...


class StatusClient(Protocol):
    def update_status(self, control_plane: ControlPlane) -> ControlPlane: ...
