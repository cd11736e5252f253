# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/rotation/planner.py
from __future__ import annotations

from typing import List

from ..cluster.nodes import Node, RoleShape, role_shape
from ..cluster.plan import File, NodePlan, OneTimeInstruction
from ..cluster.runtime import get_runtime, get_runtime_agent_unit, get_runtime_server_unit
from ..config.models import ControlPlane, RotateCertificates
from .script import IDEMPOTENT_ROTATE_SCRIPT, script_path


def _restart(unit: str) -> OneTimeInstruction:
    return OneTimeInstruction(name="restart", command="systemctl", args=["restart", unit])


def rotate_args(runtime: str, rotation: RotateCertificates) -> List[str]:
    """
    Arguments for ``sh``. This shape is what the node-side script parses:
    ``-xe <script> <runtime> <generation> [-s <service>]...``
    """
    args = ["-xe", script_path(runtime), runtime, str(rotation.generation)]
    for service in rotation.services:
        args.extend(["-s", service])
    return args


def build_plan(control_plane: ControlPlane, rotation: RotateCertificates, node: Node) -> NodePlan:
    """
    Rotate the certificates for the services in *rotation* (all of them when
    none are listed) and restart the runtime so it reloads them.

    Worker-only nodes do not rotate anything themselves; restarting the agent
    picks up the refreshed certificates.
    """
    version = control_plane.spec.kubernetes_version
    shape = role_shape(node)

    if shape is RoleShape.WORKER_ONLY:
        return NodePlan(instructions=[_restart(get_runtime_agent_unit(version))])

    if shape is RoleShape.CONTROL_PLANE_OR_ETCD:
        runtime = get_runtime(version)
        return NodePlan(
            files=[File.from_text(script_path(runtime), IDEMPOTENT_ROTATE_SCRIPT)],
            instructions=[
                OneTimeInstruction(
                    name="rotate certificates",
                    command="sh",
                    args=rotate_args(runtime, rotation),
                ),
                _restart(get_runtime_server_unit(version)),
            ],
        )

    raise ValueError(f"Unhandled role shape {shape!r} for node '{node.machine_name}'")
