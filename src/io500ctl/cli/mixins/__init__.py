# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Stage mixins composed by Io500Orchestrator."""

from .benchmark_stage import BenchmarkStageMixin
from .cluster_stage import ClusterStageMixin
from .config_stage import ConfigStageMixin
from .connectivity_stage import ConnectivityStageMixin
from .repository_stage import RepositoryStageMixin

__all__ = [
    "BenchmarkStageMixin",
    "ClusterStageMixin",
    "ConfigStageMixin",
    "ConnectivityStageMixin",
    "RepositoryStageMixin",
]
