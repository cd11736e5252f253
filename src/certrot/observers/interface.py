# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
from typing import Protocol
from .events import BaseEvent

class Observer(Protocol):
    """
    Receives every event of a rotation pass, in emission order.
    Raising is allowed; EventBus logs it and moves on to the next observer.
    """

    def notify(self, event: BaseEvent) -> None: ...
