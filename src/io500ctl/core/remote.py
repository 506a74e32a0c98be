# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Shelling out to ssh, scp, rsync and git.

This module consolidates all subprocess handling:
- Command builders: ssh_command, scp_command, rsync_command, git_clone_command
- Execution: run_command (raises on failure), probe (returns bool)

No timeouts are applied; a hung tool hangs the caller.
"""

import logging
import shlex
import subprocess
from collections.abc import Sequence

from io500ctl.core.errors import RemoteExecutionError

logger = logging.getLogger(__name__)


# ============================================================================
# Command Builders
# ============================================================================


def ssh_target(host: str, user: str | None = None) -> str:
    """Format user@host (or just host)."""
    return f"{user}@{host}" if user else host


def join_remote(*parts: Sequence[str] | str) -> str:
    """Join commands for a remote shell with '&&'.

    List parts are quoted with shlex.join; string parts are used verbatim so
    the remote shell can still expand ~ and globs in them.
    """
    rendered = [part if isinstance(part, str) else shlex.join(part) for part in parts]
    return " && ".join(rendered)


def ssh_command(
    target: str,
    remote_command: str,
    *,
    ssh_config: str | None = None,
    quiet: bool = False,
    batch_mode: bool = False,
) -> list[str]:
    """Build an ssh invocation running remote_command on target.

    Args:
        target: host or user@host
        remote_command: Shell command string evaluated by the remote shell
        ssh_config: Optional ssh config file (-F)
        quiet: Suppress warnings and diagnostics (-q)
        batch_mode: Never prompt for passwords or host keys
    """
    cmd = ["ssh"]
    if quiet:
        cmd.append("-q")
    if batch_mode:
        cmd.extend(["-o", "BatchMode=yes"])
    if ssh_config:
        cmd.extend(["-F", ssh_config])
    cmd.extend([target, remote_command])
    return cmd


def scp_command(
    source: str,
    destination: str,
    *,
    recursive: bool = False,
    ssh_config: str | None = None,
) -> list[str]:
    cmd = ["scp"]
    if recursive:
        cmd.append("-r")
    if ssh_config:
        cmd.extend(["-F", ssh_config])
    cmd.extend([source, destination])
    return cmd


def rsync_command(
    source: str,
    destination: str,
    *,
    delete: bool = False,
    protect: Sequence[str] = (),
) -> list[str]:
    """Build a one-way rsync.

    With delete=True the destination becomes an exact mirror, except for the
    `protect` patterns (rsync filter syntax, anchored at the transfer root),
    which are never deleted on the receiving side.
    """
    cmd = ["rsync", "-az"]
    if delete:
        cmd.append("--delete")
    cmd.extend(f"--filter=P {pattern}" for pattern in protect)
    cmd.extend([source, destination])
    return cmd


def git_clone_command(url: str, branch: str, destination: str) -> list[str]:
    return ["git", "clone", "--branch", branch, "--single-branch", url, destination]


# ============================================================================
# Execution
# ============================================================================


def run_command(
    command: Sequence[str],
    *,
    capture: bool = False,
    error_cls: type[RemoteExecutionError] = RemoteExecutionError,
) -> str:
    """Run a command to completion, raising on a non-zero exit.

    Args:
        command: Command as list of strings
        capture: Capture and return stdout instead of streaming it
        error_cls: Exception type raised on failure

    Returns:
        Captured stdout, or "" when not capturing

    Raises:
        RemoteExecutionError (or error_cls): The command exited non-zero or
            could not be started
    """
    logger.debug("Running: %s", shlex.join(command))

    try:
        result = subprocess.run(
            list(command),
            capture_output=capture,
            text=True,
        )
    except FileNotFoundError as e:
        raise error_cls(command, 127, str(e)) from e

    if result.returncode != 0:
        output = (result.stderr or result.stdout or "") if capture else ""
        raise error_cls(command, result.returncode, output)

    return result.stdout if capture else ""


def probe(command: Sequence[str]) -> bool:
    """Run a command silently and report whether it succeeded."""
    logger.debug("Probing: %s", shlex.join(command))
    try:
        result = subprocess.run(
            list(command),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        return False
    return result.returncode == 0
