# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Error types raised by orchestrator stages.

Each kind of failure has its own class so the top level can decide how to
report it and whether cloud resources should be torn down.
"""

import shlex
from collections.abc import Sequence


class Io500CtlError(Exception):
    """Base class for all expected orchestrator failures."""


class ConfigurationError(Io500CtlError):
    """Invalid settings file, template, or run configuration."""


class OptionError(ConfigurationError):
    """One or more command-line options were invalid.

    All problems found while scanning the argument list are carried together
    so they can be reported in a single pass.
    """

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class HelpRequested(Exception):
    """Raised by the option parser when -h/--help is seen."""


class ConnectivityError(Io500CtlError):
    """The controller host could not be reached over ssh."""


class RemoteExecutionError(Io500CtlError):
    """A shelled-out command (ssh, scp, rsync, git) exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {shlex.join(self.command)}"
        if output:
            message += f"\n{output.strip()}"
        super().__init__(message)


class ExternalToolError(RemoteExecutionError):
    """The cluster start/stop scripts failed."""
