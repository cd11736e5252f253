# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/delivery/status_file.py
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml

from ..config.models import ControlPlane
from ..errors import StatusUpdateError

log = logging.getLogger("certrot")


class FileStatusClient:
    """
    Persists ``control_plane.status`` back into the rotation config file.

    Only the status block changes; the rest of the document keeps its values as
    loaded (without ${ENV} expansion). The file is re-serialized with
    yaml.safe_dump, so comments and custom formatting in it are lost on the
    first commit. The write goes through a temp file and
    os.replace, so readers see either the old or the new file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def update_status(self, control_plane: ControlPlane) -> ControlPlane:
        try:
            doc = yaml.safe_load(self.path.read_text()) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StatusUpdateError(f"cannot read {self.path}: {exc}") from exc

        cp_doc = doc.get("control_plane")
        if not isinstance(cp_doc, dict):
            raise StatusUpdateError(f"{self.path}: no control_plane mapping to update")
        if cp_doc.get("name") not in (None, control_plane.name):
            raise StatusUpdateError(
                f"{self.path}: holds control plane '{cp_doc.get('name')}', not '{control_plane.name}'"
            )

        cp_doc["status"] = control_plane.status.model_dump()

        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(doc, f, sort_keys=False)
            os.replace(tmp, self.path)
        except OSError as exc:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StatusUpdateError(f"cannot write {self.path}: {exc}") from exc

        log.debug("status of %s written to %s", control_plane.name, self.path)
        return control_plane.model_copy(deep=True)
