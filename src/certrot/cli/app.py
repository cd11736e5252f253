# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/cli/app.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from certrot.cluster.nodes import collect_nodes, any_role
from certrot.config.loader import load_config
from certrot.delivery.dry_run import DryRunPlanStore, DryRunStatusClient
from certrot.delivery.ssh_store import SshPlanStore
from certrot.delivery.status_file import FileStatusClient
from certrot.errors import CertrotError
from certrot.logging.log import init_logging
from certrot.observers.console import ConsoleObserver
from certrot.observers.jsonfile import JsonFileObserver
from certrot.observers.logger import LoggerObserver
from certrot.rotation.gate import should_rotate
from certrot.rotation.orchestrator import CertificateRotation
from certrot.rotation.planner import build_plan
from certrot.utils.execution import ExecutionContext
from certrot.utils.serialize import to_jsonable


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Certificate rotation for rke2/k3s clusters")


def _load(config: Path):
    try:
        return load_config(config)
    except CertrotError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def check(config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Rotation config (YAML)")):
    """
    Report whether a rotation pass is pending. Exit code 0 either way.
    """
    cfg = _load(config)
    cp = cfg.control_plane
    requested = cp.spec.rotate_certificates.generation if cp.spec.rotate_certificates else None
    state = "pending" if should_rotate(cp) else "up-to-date"
    typer.echo(
        f"{cp.name}: {state} "
        f"(applied={cp.status.certificate_rotation_generation} requested={requested} "
        f"initialized={cp.status.initialized})"
    )


@app.command()
def plan(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Rotation config (YAML)"),
    node: Optional[str] = typer.Option(None, "--node", help="Only print the plan for this machine"),
):
    """
    Print the plan every node would get for the requested generation.
    """
    cfg = _load(config)
    cp = cfg.control_plane
    if cp.spec.rotate_certificates is None:
        typer.echo("error: control_plane.spec.rotate_certificates is not set", err=True)
        raise typer.Exit(code=2)

    nodes = collect_nodes(cfg.cluster_plan(), any_role)
    if node:
        nodes = [n for n in nodes if n.machine_name == node]
        if not nodes:
            raise typer.BadParameter(f"Unknown node: {node}", param_hint="--node")

    plans = {
        n.machine_name: to_jsonable(build_plan(cp, cp.spec.rotate_certificates, n))
        for n in nodes
    }
    typer.echo(json.dumps(plans, indent=2))


@app.command()
def rotate(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Rotation config (YAML)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build and log plans without touching nodes or status"),
    debug: bool = typer.Option(False, "--debug", help="Verbose console output"),
    events_file: Optional[Path] = typer.Option(None, "--events-file", help="Append lifecycle events as JSON lines"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for run logs"),
):
    """
    Run one rotation pass and commit the generation when every node converged.
    """
    cfg = _load(config)
    ctx = ExecutionContext(dry_run=dry_run)
    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=debug)

    observers = [ConsoleObserver(), LoggerObserver(logger)]
    observers.append(
        JsonFileObserver(events_file or log_path.with_name(f"{run_id}.jsonl"))
    )

    if ctx.dry_run:
        store, status_client = DryRunPlanStore(), DryRunStatusClient()
    else:
        store, status_client = SshPlanStore(ctx), FileStatusClient(config)

    rotation = CertificateRotation(
        store,
        status_client,
        observers=observers,
        env=cfg.environment,
        context=cfg.context,
        run_id=run_id,
    )
    try:
        updated = rotation.rotate_certificates(cfg.control_plane, cfg.cluster_plan())
    except Exception as exc:
        logger.error("rotation failed: %s (log: %s)", exc, log_path)
        raise typer.Exit(code=1)

    typer.echo(
        f"{updated.name}: certificate_rotation_generation="
        f"{updated.status.certificate_rotation_generation}"
    )


def main():
    app()


if __name__ == "__main__":
    main()
