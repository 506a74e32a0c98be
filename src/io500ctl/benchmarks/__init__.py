# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""IO500 ini injection strategies."""

from io500ctl.benchmarks import io500  # noqa: F401  (registers strategies)
from io500ctl.benchmarks.base import IniInjectionStrategy, get_strategy, list_strategies, register_strategy

__all__ = [
    "IniInjectionStrategy",
    "get_strategy",
    "list_strategies",
    "register_strategy",
]
