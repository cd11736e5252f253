# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/rotation/orchestrator.py
from __future__ import annotations

import logging
import time
from typing import List, Optional

from ..cluster.nodes import ClusterPlan, any_role, collect_nodes, role_shape
from ..config.models import ControlPlane
from .gate import should_rotate
from .interface import PlanStore, StatusClient
from .planner import build_plan

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    NodePlanBuilt,
    NodePlanConverged,
    NodePlanFailed,
    RotationCommitted,
    RotationFailed,
    RotationSkipped,
    RotationStarted,
)

log = logging.getLogger("certrot")


def plan_label(machine_name: str) -> str:
    return f"[{machine_name}] certificate rotation"


def _skip_reason(cp: ControlPlane) -> str:
    if not cp.status.initialized:
        return "control plane not initialized"
    if cp.spec.rotate_certificates is None:
        return "no rotation requested"
    return f"generation {cp.status.certificate_rotation_generation} already applied"


class CertificateRotation:
    """
    Drives one rotation pass: gate, per-node plans, then the status commit.

    Nodes are handled one at a time and the first failure ends the pass with
    the status untouched. Re-running a partially applied generation is safe
    because the node-side script skips rotation once its marker matches.
    """

    def __init__(
        self,
        store: PlanStore,
        status_client: StatusClient,
        *,
        observers: Optional[List] = None,
        env: str = "dev",
        context: Optional[str] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.status_client = status_client
        self.bus = EventBus(observers or [])
        self.env = env
        self.context = context
        self.run_id = run_id  # ties events to the run log when set

    def rotate_certificates(self, control_plane: ControlPlane, cluster_plan: ClusterPlan) -> ControlPlane:
        """
        Rotate certificates on every node if the requested generation is not
        applied yet. Returns the control plane as persisted (or unchanged when
        there was nothing to do).
        """
        run_ctx = new_ctx(env=self.env, context=self.context)
        if self.run_id:
            run_ctx.update(run_id=self.run_id)
        cluster = control_plane.name

        if not should_rotate(control_plane):
            reason = _skip_reason(control_plane)
            log.debug("[%s] skipping certificate rotation: %s", cluster, reason)
            self.bus.emit(RotationSkipped(cluster=cluster, reason=reason, **run_ctx))
            return control_plane

        rotation = control_plane.spec.rotate_certificates
        nodes = collect_nodes(cluster_plan, any_role)
        log.info(
            "[%s] rotating certificates: generation %d -> %d on %d node(s)",
            cluster,
            control_plane.status.certificate_rotation_generation,
            rotation.generation,
            len(nodes),
        )
        self.bus.emit(
            RotationStarted(
                cluster=cluster,
                from_generation=control_plane.status.certificate_rotation_generation,
                to_generation=rotation.generation,
                services=list(rotation.services),
                nodes=[n.machine_name for n in nodes],
                **run_ctx,
            )
        )
        t_pass = time.time()

        for node in nodes:
            node_plan = build_plan(control_plane, rotation, node)
            self.bus.emit(
                NodePlanBuilt(
                    node=node.machine_name,
                    shape=role_shape(node).value,
                    checksum=node_plan.checksum(),
                    instructions=[i.name for i in node_plan.instructions],
                    **run_ctx,
                )
            )

            t0 = time.time()
            try:
                # no tolerated failures at this layer
                self.store.assign_and_check(plan_label(node.machine_name), node, node_plan, 0, 0)
            except Exception as e:
                log.error("[%s] certificate rotation failed on %s: %s", cluster, node.machine_name, e)
                self.bus.emit(NodePlanFailed(node=node.machine_name, error=str(e), **run_ctx))
                self.bus.emit(
                    RotationFailed(
                        cluster=cluster,
                        generation=rotation.generation,
                        error=str(e),
                        node=node.machine_name,
                        **run_ctx,
                    )
                )
                raise

            duration_ms = int((time.time() - t0) * 1000)
            log.debug("[%s] %s converged in %dms", cluster, node.machine_name, duration_ms)
            self.bus.emit(NodePlanConverged(node=node.machine_name, duration_ms=duration_ms, **run_ctx))

        pending = control_plane.model_copy(deep=True)
        pending.status.certificate_rotation_generation = rotation.generation
        try:
            updated = self.status_client.update_status(pending)
        except Exception as e:
            log.error("[%s] nodes rotated but status commit failed: %s", cluster, e)
            self.bus.emit(
                RotationFailed(cluster=cluster, generation=rotation.generation, error=str(e), **run_ctx)
            )
            raise

        control_plane.status = updated.status.model_copy()
        self.bus.emit(
            RotationCommitted(
                cluster=cluster,
                generation=rotation.generation,
                duration_ms=int((time.time() - t_pass) * 1000),
                **run_ctx,
            )
        )
        log.info("[%s] certificate rotation generation %d committed", cluster, rotation.generation)
        return updated
