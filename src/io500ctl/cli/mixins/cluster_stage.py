# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Cluster stage mixin for Io500Orchestrator.

Drives the provisioning repository's start/stop scripts on the controller.
"""

import logging
import posixpath
from typing import TYPE_CHECKING

from io500ctl.core import remote
from io500ctl.core.errors import ExternalToolError
from io500ctl.logging_utils import log_banner

if TYPE_CHECKING:
    from io500ctl.core.schema import ClusterSettings
    from io500ctl.core.session import SessionContext

logger = logging.getLogger(__name__)


class ClusterStageMixin:
    """Mixin for DAOS cluster start and stop.

    Requires:
        self.settings: ClusterSettings
        self.session: SessionContext
        self.controller: ssh target for the controller host
        self.cluster_started: bool
    """

    # Type hints for mixin dependencies
    settings: "ClusterSettings"
    session: "SessionContext"
    controller: str
    cluster_started: bool

    def _cluster_script_command(self, script: str, args: list[str]) -> list[str]:
        """ssh command running script from the example dir on the controller."""
        remote_cmd = remote.join_remote(
            ["cd", self.settings.remote_example_dir],
            [f"./{script}", *args],
        )
        return remote.ssh_command(self.controller, remote_cmd)

    def start_cluster(self) -> None:
        """Deploy DAOS servers and clients with the session config.

        Raises:
            ExternalToolError: start script failed
        """
        log_banner(logger, "Deploying DAOS cluster and clients")
        # start.sh runs from the example dir, so pass the config path relative to it
        config_arg = posixpath.relpath(self.session.remote_config_path, self.settings.remote_example_dir)
        cmd = self._cluster_script_command(
            self.settings.start_script,
            [*self.settings.start_args, "-c", config_arg],
        )
        remote.run_command(cmd, error_cls=ExternalToolError)
        self.cluster_started = True
        logger.info("Successfully deployed DAOS cluster and clients with config file: %s", config_arg)

    def stop_cluster(self) -> None:
        """Tear down DAOS servers and clients.

        Raises:
            ExternalToolError: stop script failed
        """
        log_banner(logger, "Removing DAOS cluster and clients")
        # Teardown is attempted at most once per session
        self.cluster_started = False
        remote.run_command(
            self._cluster_script_command(self.settings.stop_script, []),
            error_cls=ExternalToolError,
        )
        logger.info("DAOS cluster and clients removed")
