# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/config/models.py

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from ..cluster.nodes import ClusterPlan, Node

Role = Literal["etcd", "controlplane", "worker"]


class RotateCertificates(BaseModel):
    """Desired rotation request. Bumping ``generation`` asks for a new pass."""

    generation: int = 0
    services: List[str] = Field(default_factory=list)  # order becomes "-s" flag order


class ControlPlaneSpec(BaseModel):
    kubernetes_version: str
    rotate_certificates: Optional[RotateCertificates] = None


class ControlPlaneStatus(BaseModel):
    initialized: bool = False
    certificate_rotation_generation: int = 0  # last generation applied to every node


class ControlPlane(BaseModel):
    name: str
    namespace: str = "fleet-default"
    spec: ControlPlaneSpec
    status: ControlPlaneStatus = Field(default_factory=ControlPlaneStatus)


class SshDefaults(BaseModel):
    """Connection settings for nodes that do not set their own."""

    username: str = "root"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[str] = None


class NodeSpec(BaseModel):
    name: str                       # machine name, used in plan labels
    address: str                    # IP or DNS to connect
    roles: List[Role] = Field(min_length=1)
    username: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = None
    pkey_path: Optional[str] = None

    def to_node(self, ssh: SshDefaults) -> Node:
        return Node(
            machine_name=self.name,
            roles=frozenset(self.roles),
            address=self.address,
            username=self.username or ssh.username,
            port=self.port or ssh.port,
            password=self.password or ssh.password,
            pkey_path=self.pkey_path or ssh.pkey_path,
        )


class RotationConfig(BaseModel):
    context: Optional[str] = None       # Kubernetes context, recorded on events
    environment: Literal["dev", "staging", "prod"] = "dev"
    control_plane: ControlPlane
    ssh: SshDefaults = Field(default_factory=SshDefaults)
    nodes: List[NodeSpec] = Field(default_factory=list)

    def cluster_plan(self) -> ClusterPlan:
        """Node inventory in the order it was declared."""
        return ClusterPlan(nodes=[n.to_node(self.ssh) for n in self.nodes])
