# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Connectivity stage mixin for Io500Orchestrator.

Verifies ssh access to the controller host, bootstrapping it once if needed.
"""

import logging
from typing import TYPE_CHECKING

from io500ctl.core import remote
from io500ctl.core.errors import ConnectivityError, RemoteExecutionError
from io500ctl.core.template import expand_template

if TYPE_CHECKING:
    from io500ctl.core.schema import ClusterSettings

logger = logging.getLogger(__name__)


class ConnectivityStageMixin:
    """Mixin for the controller connectivity check.

    Requires:
        self.settings: ClusterSettings
        self.controller: ssh target for the controller host
    """

    # Type hints for mixin dependencies
    settings: "ClusterSettings"
    controller: str

    def _probe_controller(self) -> bool:
        return remote.probe(remote.ssh_command(self.controller, "exit", quiet=True, batch_mode=True))

    def _bootstrap_ssh(self) -> None:
        """Run the cloud ssh bootstrap command for the controller."""
        host = self.settings.controller_host
        logger.info("Setting up SSH to %s", host)
        cmd = expand_template(
            self.settings.ssh_bootstrap_command,
            {"host": host, "project": self.settings.gcp_project},
        )
        try:
            remote.run_command(cmd)
        except RemoteExecutionError as e:
            raise ConnectivityError(f"SSH setup for {host} failed: {e}") from e

    def check_connectivity(self) -> None:
        """Probe the controller; on failure bootstrap ssh and probe exactly once more.

        Raises:
            ConnectivityError: The controller is still unreachable after bootstrap
        """
        host = self.settings.controller_host

        if self._probe_controller():
            logger.info("SSH connectivity to %s: OK", host)
            return

        self._bootstrap_ssh()

        if not self._probe_controller():
            raise ConnectivityError(f"Can't SSH connect to {host}!")

        logger.info("SSH connectivity to %s: OK", host)
