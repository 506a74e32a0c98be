# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Config stage mixin for Io500Orchestrator.

Creates the session result folders, renders config.sh from the template and
ships it to the controller, and applies the IO500 ini selection.
"""

import logging
import shlex
from typing import TYPE_CHECKING, Any

from io500ctl.core import remote
from io500ctl.core.errors import ConfigurationError
from io500ctl.core.template import read_config_template, substitute_placeholders, unresolved_placeholders

if TYPE_CHECKING:
    from io500ctl.benchmarks.base import IniInjectionStrategy
    from io500ctl.core.schema import ClusterSettings, RunConfiguration
    from io500ctl.core.session import SessionContext

logger = logging.getLogger(__name__)


def config_values(session_id: str, config: "RunConfiguration") -> dict[str, Any]:
    """Placeholder values for the config template."""
    return {
        "perf_session_id": session_id,
        "daos_cont_props": config.container_properties,
        "duration_in_seconds": config.duration_seconds,
        "io500_ini": config.io500_ini,
    }


def render_config(template: str, session_id: str, config: "RunConfiguration") -> str:
    """Render the config template by literal placeholder replacement.

    Raises:
        ConfigurationError: A placeholder survived substitution
    """
    values = config_values(session_id, config)
    rendered = substitute_placeholders(template, values)
    leftover = unresolved_placeholders(rendered, list(values))
    if leftover:
        raise ConfigurationError(f"Unresolved placeholders in config: {', '.join(leftover)}")
    return rendered


class ConfigStageMixin:
    """Mixin for config materialization.

    Requires:
        self.config: RunConfiguration
        self.settings: ClusterSettings
        self.session: SessionContext
        self.controller: ssh target for the controller host
        self.ini_strategy: IniInjectionStrategy
    """

    # Type hints for mixin dependencies
    config: "RunConfiguration"
    settings: "ClusterSettings"
    session: "SessionContext"
    controller: str

    @property
    def ini_strategy(self) -> "IniInjectionStrategy":
        """Selected ini injection strategy."""
        ...

    def setup_working_folders(self) -> None:
        """Create the session result directory locally and on the controller."""
        self.session.local_results_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Working folder created: %s", self.session.local_results_dir)

        remote.run_command(
            remote.ssh_command(self.controller, shlex.join(["mkdir", "-p", self.session.remote_results_dir]))
        )
        logger.info("Remote working folder created: %s:%s", self.settings.controller_host, self.session.remote_results_dir)

    def generate_config(self) -> None:
        """Render config.sh into the session folder and copy it to the controller."""
        try:
            template = read_config_template(self.settings.config_template)
        except OSError as e:
            raise ConfigurationError(f"Could not read config template: {e}") from e

        rendered = render_config(template, self.session.session_id, self.config)
        self.session.local_config_path.write_text(rendered)
        logger.info("Config file generated: %s", self.session.local_config_path)

        remote.run_command(
            remote.scp_command(
                str(self.session.local_config_path),
                f"{self.controller}:{self.session.remote_config_path}",
            )
        )
        logger.info("Config file copied to %s:%s", self.settings.controller_host, self.session.remote_config_path)

    def apply_ini_selection(self) -> None:
        """Let the ini strategy prepare the local clone before it is re-synced."""
        logger.info("Applying IO500 ini %s (%s strategy)", self.config.io500_ini, self.ini_strategy.name)
        self.ini_strategy.prepare(self.config, self.settings)
