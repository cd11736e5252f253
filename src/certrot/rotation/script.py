# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/rotation/script.py
from __future__ import annotations

from ..cluster.runtime import data_root

# Positional args: <runtime> <generation> [-s <service>]...
# The generation marker is written after the rotate branch whatever happened;
# under "sh -e" a failing rotate command exits before reaching it.
IDEMPOTENT_ROTATE_SCRIPT = """#!/bin/sh

currentGeneration=""
targetGeneration=$2
runtime=$1
shift
shift

dataRoot="/var/lib/rancher/$runtime/certificate_rotation"
generationFile="$dataRoot/generation"

currentGeneration=$(cat "$generationFile" || echo "")

if [ "$currentGeneration" != "$targetGeneration" ]; then
  $runtime certificate rotate "$@"
else
  echo "certificates have already been rotated to the current generation."
fi

mkdir -p "$dataRoot"
echo "$targetGeneration" > "$generationFile"
"""


def rotation_dir(runtime: str) -> str:
    return f"{data_root(runtime)}/certificate_rotation"


def script_path(runtime: str) -> str:
    return f"{rotation_dir(runtime)}/bin/rotate.sh"


def generation_file(runtime: str) -> str:
    return f"{rotation_dir(runtime)}/generation"
