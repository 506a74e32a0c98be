# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Typed configuration records.

RunConfiguration holds what the operator chose on the command line for one
invocation. ClusterSettings holds the site-specific values (controller host,
provisioning repository, script names) normally read from io500ctl.yaml.

Both are frozen marshmallow dataclasses so that validation reports every
bad field at once.
"""

from dataclasses import field
from pathlib import Path
from typing import ClassVar, List, Optional, Tuple, Type

import yaml
from marshmallow import Schema, ValidationError, validate
from marshmallow_dataclass import dataclass

DEFAULT_IO500_INI = "io500-isc22.config-template.daos-rf0.ini"


def validate_container_properties(value: str) -> None:
    """Require a comma-separated list of property:value entries."""
    if not value:
        raise ValidationError("must not be empty")
    for entry in value.split(","):
        key, sep, prop_value = entry.partition(":")
        if not key or not sep or not prop_value:
            raise ValidationError(f"'{entry}' is not a property:value pair")


@dataclass(frozen=True)
class RunConfiguration:
    """Parameters of one orchestrator invocation.

    Example:
        RunConfiguration(iterations=7, duration_seconds=300,
                         container_properties="rf:1,cksum:crc64",
                         io500_ini="io500-isc22.config-template.daos-rf1.ini")
    """

    iterations: int = field(
        default=1,
        metadata={"validate": validate.Range(min=1, error="must be a positive integer")},
    )
    duration_seconds: int = field(
        default=60,
        metadata={"validate": validate.Range(min=1, error="must be a positive integer")},
    )
    container_properties: str = field(
        default="rf:0",
        metadata={"validate": validate_container_properties},
    )
    io500_ini: str = field(
        default=DEFAULT_IO500_INI,
        metadata={"validate": validate.Length(min=1, error="must not be empty")},
    )
    teardown_on_failure: bool = False

    Schema: ClassVar[Type[Schema]] = Schema

    @property
    def property_pairs(self) -> List[Tuple[str, str]]:
        """Container properties as ordered (key, value) pairs."""
        pairs = []
        for entry in self.container_properties.split(","):
            key, _, value = entry.partition(":")
            pairs.append((key, value))
        return pairs


@dataclass(frozen=True)
class ClusterSettings:
    """Site settings for the controller host and provisioning repository.

    Example YAML (io500ctl.yaml):
        controller_host: daos-controller
        gcp_project: cloud-daos-perf-testing
        repo_branch: main
        ini_strategy: overwrite
        teardown_on_failure: false
    """

    # Controller host and cloud project
    controller_host: str = "daos-controller"
    ssh_user: Optional[str] = None
    gcp_project: str = "cloud-daos-perf-testing"
    ssh_bootstrap_command: List[str] = field(
        default_factory=lambda: [
            "gcloud",
            "compute",
            "ssh",
            "{host}",
            "--project",
            "{project}",
            "--command",
            "exit",
        ]
    )

    # Provisioning repository
    repo_url: str = "https://github.com/daos-stack/google-cloud-daos.git"
    repo_branch: str = "main"
    local_repo_dir: str = "google-cloud-daos"
    remote_repo_dir: str = "google-cloud-daos"
    example_subdir: str = "terraform/examples/io500"
    # Run state under example_subdir on the controller; kept by the repository mirror
    remote_state_paths: List[str] = field(
        default_factory=lambda: [
            "results/",
            "tmp/",
            ".terraform/",
            "terraform.tfstate*",
        ]
    )

    # Cluster lifecycle scripts (relative to example_subdir)
    start_script: str = "start.sh"
    start_args: List[str] = field(default_factory=lambda: ["-i"])
    stop_script: str = "stop.sh"
    config_template: Optional[str] = None

    # Benchmark client
    client_ssh_config: str = "tmp/ssh_config"
    client_address_pattern: str = r"^10\."
    run_script: str = "~/run_io500-isc22.sh"
    client_results_dir: str = "~/io500-isc22/results"
    well_known_ini: str = "io500-isc22.config-template.ini"
    ini_strategy: str = field(
        default="overwrite",
        metadata={"validate": validate.OneOf(["overwrite", "parameter"])},
    )

    # Local results and policies
    results_dir: str = "results"
    teardown_on_failure: bool = False
    unique_session_suffix: bool = False

    Schema: ClassVar[Type[Schema]] = Schema

    @classmethod
    def from_yaml(cls, path: Path) -> "ClusterSettings":
        """Load settings from a YAML file (empty file means all defaults)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.Schema().load(data)

    @property
    def remote_example_dir(self) -> str:
        """Example directory on the controller, relative to the remote home."""
        return f"{self.remote_repo_dir}/{self.example_subdir}"

    @property
    def local_example_dir(self) -> Path:
        return Path(self.local_repo_dir) / self.example_subdir

    @property
    def protected_sync_patterns(self) -> List[str]:
        """remote_state_paths as rsync patterns anchored at the repository root."""
        base = self.example_subdir.strip("/")
        return [f"/{base}/{path}" for path in self.remote_state_paths]
