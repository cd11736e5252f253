# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass

@dataclass(frozen=True)
class ExecutionContext:
    """
    controls how plans are delivered
    """

    dry_run: bool = False
    connect_timeout: float = 20.0
    command_timeout: int = 600
