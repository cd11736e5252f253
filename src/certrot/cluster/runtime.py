# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/cluster/runtime.py
from __future__ import annotations

RUNTIME_RKE2 = "rke2"
RUNTIME_K3S = "k3s"

DATA_ROOT_BASE = "/var/lib/rancher"


def get_runtime(kubernetes_version: str) -> str:
    """
    Distribution that runs the node, derived from the Kubernetes version string
    (e.g. "v1.28.5+k3s1" -> k3s, "v1.28.5+rke2r1" -> rke2).
    """
    if RUNTIME_K3S in kubernetes_version:
        return RUNTIME_K3S
    return RUNTIME_RKE2


def get_runtime_server_unit(kubernetes_version: str) -> str:
    runtime = get_runtime(kubernetes_version)
    # k3s ships a single unit for servers
    if runtime == RUNTIME_K3S:
        return RUNTIME_K3S
    return f"{runtime}-server"


def get_runtime_agent_unit(kubernetes_version: str) -> str:
    return f"{get_runtime(kubernetes_version)}-agent"


def data_root(runtime: str) -> str:
    return f"{DATA_ROOT_BASE}/{runtime}"
