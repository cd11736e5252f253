# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
import logging
from .events import BaseEvent, NodePlanFailed, RotationFailed

_CONTEXT_KEYS = ("ts", "run_id", "env", "context")


class LoggerObserver:
    """Writes each event as one log line; failures are logged as errors."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = {k: v for k, v in event.dict().items() if k not in _CONTEXT_KEYS}
        level = logging.ERROR if isinstance(event, (NodePlanFailed, RotationFailed)) else logging.INFO
        self.logger.log(
            level,
            "[EVENT] %s run=%s: %s",
            event.__class__.__name__,
            event.run_id,
            ", ".join(f"{k}={v}" for k, v in fields.items()),
        )
