# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/cluster/plan.py
from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class File:
    path: str
    content: str  # base64, decoded on the node before writing

    @classmethod
    def from_text(cls, path: str, text: str) -> "File":
        return cls(path=path, content=base64.b64encode(text.encode()).decode())

    def decoded(self) -> bytes:
        return base64.b64decode(self.content)


@dataclass
class OneTimeInstruction:
    name: str          # human label
    command: str
    args: List[str] = field(default_factory=list)

    def argv(self) -> List[str]:
        return [self.command, *self.args]


@dataclass
class NodePlan:
    """
    Files to write and instructions to run on one node, in order.
    """
    files: List[File] = field(default_factory=list)
    instructions: List[OneTimeInstruction] = field(default_factory=list)

    def dict(self) -> Dict[str, Any]:
        return asdict(self)

    def checksum(self) -> str:
        """Stable digest of the plan; equal plans always share it."""
        raw = json.dumps(self.dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(raw.encode()).hexdigest()
