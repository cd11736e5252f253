# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/rotation/gate.py
from __future__ import annotations

from ..config.models import ControlPlane


def should_rotate(cp: ControlPlane) -> bool:
    """True if the cluster is ready and the applied generation is stale."""
    # The control plane must be initialized before we rotate anything
    if not cp.status.initialized:
        return False

    # if a rotation is not requested there is nothing to do
    if cp.spec.rotate_certificates is None:
        return False

    # a lower generation also triggers a pass
    return cp.status.certificate_rotation_generation != cp.spec.rotate_certificates.generation
