# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Repository stage mixin for Io500Orchestrator.

Keeps a local clone of the provisioning repository and mirrors it to the
controller host.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from io500ctl.core import remote

if TYPE_CHECKING:
    from io500ctl.core.schema import ClusterSettings

logger = logging.getLogger(__name__)


class RepositoryStageMixin:
    """Mixin for the provisioning repository clone and sync.

    Requires:
        self.settings: ClusterSettings
        self.controller: ssh target for the controller host
    """

    # Type hints for mixin dependencies
    settings: "ClusterSettings"
    controller: str

    def ensure_local_repository(self) -> bool:
        """Clone the provisioning repository unless a local copy exists.

        Returns:
            True if a fresh clone was made
        """
        repo_dir = Path(self.settings.local_repo_dir)
        if repo_dir.exists():
            logger.info("Using existing repository at %s", repo_dir)
            return False

        logger.info(
            "Cloning %s (branch %s) into %s",
            self.settings.repo_url,
            self.settings.repo_branch,
            repo_dir,
        )
        remote.run_command(
            remote.git_clone_command(self.settings.repo_url, self.settings.repo_branch, str(repo_dir))
        )
        return True

    def sync_repository(self) -> None:
        """Mirror the local clone to the controller, deleting files absent locally.

        Session results, the generated client ssh config and terraform state
        only exist on the controller and are protected from deletion.
        """
        source = self.settings.local_repo_dir.rstrip("/") + "/"
        destination = f"{self.controller}:{self.settings.remote_repo_dir.rstrip('/')}/"
        logger.info("Syncing %s to %s", source, destination)
        remote.run_command(
            remote.rsync_command(
                source,
                destination,
                delete=True,
                protect=self.settings.protected_sync_patterns,
            )
        )
