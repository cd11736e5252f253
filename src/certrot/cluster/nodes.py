# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/cluster/nodes.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional

ETCD_ROLE = "etcd"
CONTROL_PLANE_ROLE = "controlplane"
WORKER_ROLE = "worker"

ALL_ROLES: FrozenSet[str] = frozenset({ETCD_ROLE, CONTROL_PLANE_ROLE, WORKER_ROLE})


class RoleShape(str, Enum):
    """
    Plan shape a node gets. Every builder branches on this and nothing else.
    """
    WORKER_ONLY = "worker-only"
    CONTROL_PLANE_OR_ETCD = "controlplane-or-etcd"


@dataclass(frozen=True)
class Node:
    """
    A cluster member as seen by the planner, plus what is needed to reach it.
    """
    machine_name: str
    roles: FrozenSet[str]
    address: Optional[str] = None
    username: str = "root"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[str] = None


@dataclass
class ClusterPlan:
    nodes: List[Node] = field(default_factory=list)


RoleFilter = Callable[[Node], bool]


def any_role(node: Node) -> bool:
    return True


def is_etcd(node: Node) -> bool:
    return ETCD_ROLE in node.roles


def is_control_plane(node: Node) -> bool:
    return CONTROL_PLANE_ROLE in node.roles


def is_worker(node: Node) -> bool:
    return WORKER_ROLE in node.roles


def is_only_worker(node: Node) -> bool:
    return is_worker(node) and not is_etcd(node) and not is_control_plane(node)


def role_shape(node: Node) -> RoleShape:
    if is_etcd(node) or is_control_plane(node):
        return RoleShape.CONTROL_PLANE_OR_ETCD
    if is_only_worker(node):
        return RoleShape.WORKER_ONLY
    raise ValueError(f"Node '{node.machine_name}' has no known role: {sorted(node.roles)}")


def collect_nodes(cluster_plan: ClusterPlan, role_filter: RoleFilter = any_role) -> List[Node]:
    """Nodes matching *role_filter*, in inventory order."""
    return [n for n in cluster_plan.nodes if role_filter(n)]
