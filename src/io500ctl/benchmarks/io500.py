# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""IO500 ini injection strategies."""

from __future__ import annotations

import logging
import shlex
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from io500ctl.benchmarks.base import IniInjectionStrategy, register_strategy
from io500ctl.core.errors import ConfigurationError

if TYPE_CHECKING:
    from io500ctl.core.schema import ClusterSettings, RunConfiguration

logger = logging.getLogger(__name__)


def resolve_ini_path(ini: str, settings: ClusterSettings) -> Path:
    """Find the ini file: an existing path as given, else inside the local example dir."""
    given = Path(ini)
    if given.is_file():
        return given
    candidate = settings.local_example_dir / ini
    if candidate.is_file():
        return candidate
    raise ConfigurationError(f"IO500 ini file not found: {ini} (also looked in {settings.local_example_dir})")


@register_strategy("overwrite")
class OverwriteIniStrategy(IniInjectionStrategy):
    """Copy the chosen ini over the filename the run script hardcodes."""

    @property
    def name(self) -> str:
        return "overwrite"

    def prepare(self, config: RunConfiguration, settings: ClusterSettings) -> None:
        source = resolve_ini_path(config.io500_ini, settings)
        target = settings.local_example_dir / settings.well_known_ini

        if target.exists() and source.resolve() == target.resolve():
            logger.info("IO500 ini %s is already the well-known file", source)
            return

        shutil.copyfile(source, target)
        logger.info("Copied IO500 ini %s -> %s", source, target)

    def benchmark_command(self, config: RunConfiguration, settings: ClusterSettings) -> str:
        return settings.run_script


@register_strategy("parameter")
class ParameterIniStrategy(IniInjectionStrategy):
    """Pass the ini filename to the run script as its first argument."""

    @property
    def name(self) -> str:
        return "parameter"

    def prepare(self, config: RunConfiguration, settings: ClusterSettings) -> None:
        logger.info("IO500 ini %s will be passed to %s", config.io500_ini, settings.run_script)

    def benchmark_command(self, config: RunConfiguration, settings: ClusterSettings) -> str:
        return f"{settings.run_script} {shlex.quote(config.io500_ini)}"
