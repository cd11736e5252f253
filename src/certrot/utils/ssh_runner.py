# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/utils/ssh_runner.py

from __future__ import annotations

import os
import posixpath
import shlex
from typing import Optional

import paramiko

from ..cluster.nodes import Node


class SSHCommandError(RuntimeError):
    pass


class SSHRunner:
    def __init__(self, client: paramiko.SSHClient):
        self.client = client

    def run(
        self,
        cmd: str,
        *,
        sudo: bool = False,
        timeout: Optional[int] = None,
    ) -> tuple[int, str, str]:
        if sudo:
            cmd = f"sudo -H -E sh -c {shlex.quote(cmd)}"

        stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
        out = stdout.read().decode()
        err = stderr.read().decode()
        rc = stdout.channel.recv_exit_status()
        return rc, out, err

    def check(self, cmd: str, *, sudo: bool = False, timeout: Optional[int] = None) -> str:
        rc, out, err = self.run(cmd, sudo=sudo, timeout=timeout)
        if rc != 0:
            raise SSHCommandError(f"'{cmd}' exited {rc}: {err.strip() or out.strip()}")
        return out

    def put_bytes(self, content: bytes, remote_path: str, *, sudo: bool = False) -> None:
        """Write *content* to *remote_path*, creating parent directories."""
        parent = posixpath.dirname(remote_path)
        if sudo:
            tmp = f"/tmp/.certrot.tmp.{os.getpid()}"
            self.put_bytes(content, tmp)
            self.check(
                f"mkdir -p {shlex.quote(parent)} && mv {tmp} {shlex.quote(remote_path)}",
                sudo=True,
            )
            return

        if parent:
            self.check(f"mkdir -p {shlex.quote(parent)}")
        sftp = self.client.open_sftp()
        try:
            with sftp.open(remote_path, "wb") as f:
                f.write(content)
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()


def open_ssh(node: Node, *, connect_timeout: float = 20.0) -> SSHRunner:
    if not node.address:
        raise ValueError(f"Node '{node.machine_name}' has no address to connect to")

    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = None
    if node.pkey_path:
        for key_cls in (
            paramiko.RSAKey,
            paramiko.Ed25519Key,
            paramiko.ECDSAKey,
        ):
            try:
                pkey = key_cls.from_private_key_file(os.path.expanduser(node.pkey_path))
                break
            except paramiko.SSHException:
                continue

    client.connect(
        hostname=node.address,
        port=node.port,
        username=node.username,
        password=node.password if not pkey else None,
        pkey=pkey,
        timeout=connect_timeout,
        allow_agent=True,
        look_for_keys=True,
    )

    return SSHRunner(client)
