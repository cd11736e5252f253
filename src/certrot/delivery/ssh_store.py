# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/delivery/ssh_store.py
from __future__ import annotations

import logging
import shlex
import time
from typing import Callable, Optional

import paramiko

from ..cluster.nodes import Node
from ..cluster.plan import NodePlan
from ..errors import PlanDeliveryError
from ..utils.execution import ExecutionContext
from ..utils.retry import RetryError, retry
from ..utils.ssh_runner import SSHCommandError, SSHRunner, open_ssh

log = logging.getLogger("certrot")

Connector = Callable[[Node], SSHRunner]


class SshPlanStore:
    """
    Delivers node plans over SSH and blocks until every instruction ran.

    Files are decoded and written first, then instructions run in order; the
    first non-zero exit fails the attempt. A failed attempt replays the whole
    plan, which is why plan instructions must be safe to repeat.
    """

    def __init__(
        self,
        ctx: Optional[ExecutionContext] = None,
        *,
        connect: Optional[Connector] = None,
        connect_retries: int = 3,
        connect_delay: float = 5.0,
        retry_delay: float = 5.0,
    ):
        self.ctx = ctx or ExecutionContext()
        self.retry_delay = retry_delay
        base = connect or (lambda node: open_ssh(node, connect_timeout=self.ctx.connect_timeout))
        self._connect = retry(
            retries=connect_retries,
            delay=connect_delay,
            retry_on=(OSError, paramiko.SSHException),
            give_up_on=(paramiko.AuthenticationException,),
            on_retry=lambda attempt, exc: log.warning("ssh connect attempt %d failed: %s", attempt, exc),
        )(base)

    def assign_and_check(
        self,
        label: str,
        node: Node,
        plan: NodePlan,
        joined_retries: int = 0,
        max_retries: int = 0,
    ) -> None:
        attempts = 1 + max(joined_retries, max_retries, 0)
        try:
            runner = self._connect(node)
        except (RetryError, paramiko.AuthenticationException) as exc:
            raise PlanDeliveryError(label, f"cannot reach {node.address}: {exc}") from exc

        try:
            for attempt in range(1, attempts + 1):
                # transport errors (dropped session, read timeout) count against the budget too
                try:
                    self._apply(label, runner, node, plan)
                    return
                except (SSHCommandError, paramiko.SSHException, OSError) as exc:
                    if attempt >= attempts:
                        raise PlanDeliveryError(label, str(exc)) from exc
                    log.warning("%s attempt %d/%d failed: %s", label, attempt, attempts, exc)
                    time.sleep(self.retry_delay)
        finally:
            runner.close()

    def _apply(self, label: str, runner: SSHRunner, node: Node, plan: NodePlan) -> None:
        sudo = node.username != "root"
        log.info("%s: applying plan %s to %s", label, plan.checksum()[:12], node.address)

        for f in plan.files:
            log.debug("%s: writing %s", label, f.path)
            runner.put_bytes(f.decoded(), f.path, sudo=sudo)

        for instruction in plan.instructions:
            cmd = shlex.join(instruction.argv())
            log.debug("%s: running '%s' (%s)", label, cmd, instruction.name)
            rc, out, err = runner.run(cmd, sudo=sudo, timeout=self.ctx.command_timeout)
            if out.strip():
                log.debug("%s: stdout:\n%s", label, out.rstrip())
            if err.strip():
                log.debug("%s: stderr:\n%s", label, err.rstrip())
            if rc != 0:
                raise SSHCommandError(f"instruction '{instruction.name}' exited {rc}: {err.strip() or out.strip()}")
