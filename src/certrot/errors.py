# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/errors.py
class CertrotError(RuntimeError):
    """Base class for certificate-rotation failures."""

class ConfigError(CertrotError):
    """Raised when a rotation config cannot be loaded or validated."""

class PlanDeliveryError(CertrotError):
    """Raised when a node plan could not be delivered or did not converge."""

    def __init__(self, label: str, message: str):
        super().__init__(f"{label}: {message}")
        self.label = label

class StatusUpdateError(CertrotError):
    """Raised when the control plane status could not be persisted."""
