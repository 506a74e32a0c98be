# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Session naming and per-session paths.

A session is one orchestrator invocation. Its id namespaces the local result
directory, the controller-side result directory and the generated config.
"""

import getpass
import secrets
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from io500ctl.core.schema import ClusterSettings

CONFIG_FILENAME = "config.sh"


def make_session_id(user: str | None = None, now: datetime | None = None, suffix: bool = False) -> str:
    """Build a session id from the user name and a minute-resolution timestamp.

    Two invocations by the same user within one minute collide unless
    suffix is set, which appends four random hex characters.
    """
    user = user or getpass.getuser()
    now = now or datetime.now()
    session_id = f"{user}{now:%Y%m%d-%H%M}"
    if suffix:
        session_id += f"-{secrets.token_hex(2)}"
    return session_id


@dataclass(frozen=True)
class SessionContext:
    """Paths derived from a session id. Created once per invocation."""

    session_id: str
    local_results_dir: Path
    remote_results_dir: str
    local_config_path: Path
    remote_config_path: str

    @classmethod
    def create(cls, settings: ClusterSettings, session_id: str) -> "SessionContext":
        local_results_dir = Path(settings.results_dir) / session_id
        remote_results_dir = f"{settings.remote_example_dir}/results/{session_id}"
        return cls(
            session_id=session_id,
            local_results_dir=local_results_dir,
            remote_results_dir=remote_results_dir,
            local_config_path=local_results_dir / CONFIG_FILENAME,
            remote_config_path=f"{remote_results_dir}/{CONFIG_FILENAME}",
        )

    def iteration(self, index: int) -> "IterationRecord":
        """Record for loop pass `index` (zero-based)."""
        name = f"iteration{index}"
        return IterationRecord(
            index=index,
            remote_dir=f"{self.remote_results_dir}/{name}",
            local_dir=self.local_results_dir / name,
        )


@dataclass(frozen=True)
class IterationRecord:
    """One benchmark run/collect/cleanup pass."""

    index: int
    remote_dir: str
    local_dir: Path
