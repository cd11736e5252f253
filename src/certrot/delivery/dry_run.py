# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/delivery/dry_run.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..cluster.nodes import Node
from ..cluster.plan import NodePlan
from ..config.models import ControlPlane

log = logging.getLogger("certrot")


@dataclass
class DryRunPlanStore:
    """Logs every plan it is handed and reports it converged."""

    submitted: List[Tuple[str, str, NodePlan]] = field(default_factory=list)

    def assign_and_check(
        self,
        label: str,
        node: Node,
        plan: NodePlan,
        joined_retries: int = 0,
        max_retries: int = 0,
    ) -> None:
        self.submitted.append((label, node.machine_name, plan))
        log.info("[dry-run] %s: %d file(s), %d instruction(s)", label, len(plan.files), len(plan.instructions))
        log.debug("[dry-run] %s plan=%s", label, json.dumps(plan.dict(), indent=2))


class DryRunStatusClient:
    """Returns the control plane without persisting anything."""

    def update_status(self, control_plane: ControlPlane) -> ControlPlane:
        log.info(
            "[dry-run] would set %s certificate_rotation_generation=%d",
            control_plane.name,
            control_plane.status.certificate_rotation_generation,
        )
        return control_plane
