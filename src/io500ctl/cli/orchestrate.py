# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Main orchestration script for IO500 runs on DAOS in GCP.

Coordinates, in order:
1. Checking ssh connectivity to the controller host
2. Cloning and syncing the provisioning repository
3. Rendering config.sh and applying the IO500 ini selection
4. Deploying the DAOS cluster and clients
5. Running IO500 N times, collecting results after each run
6. Removing the DAOS cluster and clients
"""

import functools
import getpass
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from io500ctl.benchmarks import IniInjectionStrategy, get_strategy
from io500ctl.cli.mixins import (
    BenchmarkStageMixin,
    ClusterStageMixin,
    ConfigStageMixin,
    ConnectivityStageMixin,
    RepositoryStageMixin,
)
from io500ctl.core.config import load_settings
from io500ctl.core.errors import ConfigurationError, HelpRequested, Io500CtlError, OptionError
from io500ctl.core.options import format_usage, parse_options
from io500ctl.core.remote import ssh_target
from io500ctl.core.schema import ClusterSettings, RunConfiguration
from io500ctl.core.session import IterationRecord, SessionContext, make_session_id
from io500ctl.logging_utils import log_banner, setup_logging

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Hit an unexpected and unchecked error. Exiting."


@dataclass
class Io500Orchestrator(
    ConnectivityStageMixin,
    RepositoryStageMixin,
    ConfigStageMixin,
    ClusterStageMixin,
    BenchmarkStageMixin,
):
    """Main orchestrator for one IO500 session.

    Usage:
        settings = load_settings()
        config = parse_options(sys.argv[1:])
        session = SessionContext.create(settings, make_session_id())
        orchestrator = Io500Orchestrator(config, settings, session)
        exit_code = orchestrator.run()
    """

    config: RunConfiguration
    settings: ClusterSettings
    session: SessionContext
    cluster_started: bool = False
    iterations: list[IterationRecord] = field(default_factory=list)

    @property
    def controller(self) -> str:
        """ssh target for the controller host."""
        return ssh_target(self.settings.controller_host, self.settings.ssh_user or getpass.getuser())

    @functools.cached_property
    def ini_strategy(self) -> IniInjectionStrategy:
        """Ini injection strategy named in the settings (cached)."""
        return get_strategy(self.settings.ini_strategy)

    @property
    def teardown_on_failure(self) -> bool:
        """Whether a failed run should still remove the cluster."""
        return self.config.teardown_on_failure or self.settings.teardown_on_failure

    def _handle_failed_run(self) -> None:
        """Apply the teardown policy after a failure."""
        if not self.cluster_started:
            return

        if not self.teardown_on_failure:
            logger.warning(
                "DAOS cluster left running for inspection. Remove it with: ssh %s 'cd %s && ./%s'",
                self.controller,
                self.settings.remote_example_dir,
                self.settings.stop_script,
            )
            return

        logger.warning("Run failed, removing DAOS cluster (teardown on failure enabled)")
        try:
            self.stop_cluster()
        except Io500CtlError as e:
            logger.error("Teardown failed: %s", e)

    def run(self) -> int:
        """Run the complete session."""
        log_banner(logger, f"IO500 session {self.session.session_id}")
        logger.info("Controller: %s", self.controller)
        logger.info(
            "Iterations: %d, duration: %ds, container properties: %s, ini: %s",
            self.config.iterations,
            self.config.duration_seconds,
            self.config.container_properties,
            self.config.io500_ini,
        )
        logger.info("Results: %s", self.session.local_results_dir)

        exit_code = 1

        try:
            self.check_connectivity()

            self.ensure_local_repository()
            self.sync_repository()

            self.setup_working_folders()
            self.generate_config()
            self.apply_ini_selection()
            self.sync_repository()

            self.start_cluster()
            self.iterations = self.run_benchmark_loop()
            self.stop_cluster()

            exit_code = 0

        except Io500CtlError as e:
            logger.error("%s", e)
            exit_code = 1

        except Exception as e:
            logger.exception("%s: %s", UNEXPECTED_ERROR_MESSAGE, e)
            exit_code = 1

        finally:
            if exit_code != 0:
                self._handle_failed_run()

        if exit_code == 0:
            logger.info("Results for %d iterations in %s", len(self.iterations), self.session.local_results_dir)

        return exit_code


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    setup_logging()
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        config = parse_options(args)
    except HelpRequested:
        print(format_usage())
        sys.exit(0)
    except OptionError as e:
        for error in e.errors:
            logger.error("%s", error)
        print(format_usage(), file=sys.stderr)
        sys.exit(1)

    try:
        settings = load_settings()
        session = SessionContext.create(
            settings,
            make_session_id(suffix=settings.unique_session_suffix),
        )
        orchestrator = Io500Orchestrator(config=config, settings=settings, session=session)
        exit_code = orchestrator.run()

        sys.exit(exit_code)

    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(1)

    except Exception as e:
        logger.exception("%s: %s", UNEXPECTED_ERROR_MESSAGE, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
