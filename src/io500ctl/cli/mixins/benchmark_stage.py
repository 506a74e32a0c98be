# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Benchmark stage mixin for Io500Orchestrator.

Runs IO500 on the first DAOS client N times. Each pass collects the client's
results into a per-iteration folder on the controller, clears them on the
client, and pulls the session tree back to the local host.
"""

import logging
import re
import shlex
from typing import TYPE_CHECKING

from io500ctl.core import remote
from io500ctl.core.errors import RemoteExecutionError
from io500ctl.logging_utils import log_banner

if TYPE_CHECKING:
    from io500ctl.benchmarks.base import IniInjectionStrategy
    from io500ctl.core.schema import ClusterSettings, RunConfiguration
    from io500ctl.core.session import IterationRecord, SessionContext

logger = logging.getLogger(__name__)


def parse_first_client(ssh_config_text: str, address_pattern: str) -> str | None:
    """Pick the first client address from a generated ssh config.

    Takes the second field of every line (e.g. the value of Host/HostName)
    and returns the first one matching address_pattern.
    """
    regex = re.compile(address_pattern)
    for line in ssh_config_text.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        if regex.search(fields[1]):
            return fields[1]
    return None


class BenchmarkStageMixin:
    """Mixin for the benchmark run loop.

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

    @property
    def client_ssh_config(self) -> str:
        """Generated client ssh config on the controller, relative to its home."""
        return f"{self.settings.remote_example_dir}/{self.settings.client_ssh_config}"

    def _on_controller(self, command: list[str]) -> list[str]:
        return remote.ssh_command(self.controller, shlex.join(command))

    def _on_client(self, client: str, client_command: str) -> list[str]:
        """ssh hop through the controller to the benchmark client.

        client_command is evaluated by the client's shell, so ~ expands there.
        """
        hop = ["ssh", "-F", self.client_ssh_config, client]
        return remote.ssh_command(self.controller, f"{shlex.join(hop)} {shlex.quote(client_command)}")

    def resolve_first_client(self) -> str:
        """Address of the client that runs the benchmark.

        Raises:
            RemoteExecutionError: ssh config unreadable or no matching address
        """
        text = remote.run_command(self._on_controller(["cat", self.client_ssh_config]), capture=True)
        client = parse_first_client(text, self.settings.client_address_pattern)
        if client is None:
            raise RemoteExecutionError(
                ["cat", self.client_ssh_config],
                1,
                f"no client address matching {self.settings.client_address_pattern!r}",
            )
        logger.info("First DAOS client: %s", client)
        return client

    def pull_results(self) -> None:
        """Mirror the session result tree from the controller to the local host."""
        source = f"{self.controller}:{self.session.remote_results_dir}/"
        destination = f"{self.session.local_results_dir}/"
        remote.run_command(remote.rsync_command(source, destination))
        logger.info("Results synced to %s", self.session.local_results_dir)

    def run_iteration(self, client: str, record: "IterationRecord", benchmark_command: str) -> None:
        """One run/collect/cleanup/sync pass."""
        # No -p: an existing iteration dir means a reused session and is an error
        remote.run_command(self._on_controller(["mkdir", record.remote_dir]))

        logger.info("Running IO500 on %s: %s", client, benchmark_command)
        remote.run_command(self._on_client(client, benchmark_command))

        results_glob = f"{client}:{self.settings.client_results_dir}/*"
        collect = remote.scp_command(
            results_glob,
            f"{record.remote_dir}/",
            recursive=True,
            ssh_config=self.client_ssh_config,
        )
        remote.run_command(self._on_controller(collect))
        logger.info("Collected results into %s", record.remote_dir)

        # Start the next iteration from an empty results folder
        remote.run_command(self._on_client(client, f"rm -rf {self.settings.client_results_dir}/"))

        self.pull_results()

    def run_benchmark_loop(self) -> list["IterationRecord"]:
        """Run all iterations sequentially.

        Returns:
            One IterationRecord per completed pass, indexed from 0
        """
        client = self.resolve_first_client()
        benchmark_command = self.ini_strategy.benchmark_command(self.config, self.settings)

        records: list["IterationRecord"] = []
        for n in range(self.config.iterations):
            log_banner(logger, f"Iteration {n}")
            record = self.session.iteration(n)
            self.run_iteration(client, record, benchmark_command)
            records.append(record)

        logger.info("Completed %d IO500 iterations", len(records))
        return records
