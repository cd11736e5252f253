# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/utils/serialize.py

from dataclasses import is_dataclass, asdict
from enum import Enum
from typing import Any
from pydantic import BaseModel

def to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")

    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        items = [to_jsonable(v) for v in obj]
        return sorted(items) if isinstance(obj, (set, frozenset)) else items

    if isinstance(obj, Enum):
        return obj.value

    return obj
