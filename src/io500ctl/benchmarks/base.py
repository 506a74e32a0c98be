# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Base class and registry for IO500 ini injection strategies.

The benchmark run script on the client decides which ini file it reads. Some
versions only read a fixed, well-known filename; newer ones accept the ini as
an argument. Each strategy covers one of those behaviours.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from io500ctl.core.errors import ConfigurationError

if TYPE_CHECKING:
    from io500ctl.core.schema import ClusterSettings, RunConfiguration


class IniInjectionStrategy(ABC):
    """Abstract base class that all ini injection strategies must inherit."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def prepare(self, config: RunConfiguration, settings: ClusterSettings) -> None:
        """Apply the ini selection to the local repository clone before it is synced."""
        ...

    @abstractmethod
    def benchmark_command(self, config: RunConfiguration, settings: ClusterSettings) -> str:
        """Shell command that runs the benchmark on the client."""
        ...


# Registry of ini injection strategies
_STRATEGIES: dict[str, type[IniInjectionStrategy]] = {}


def register_strategy(name: str):
    """Decorator to register an ini injection strategy class.

    Usage:
        @register_strategy("overwrite")
        class OverwriteIniStrategy(IniInjectionStrategy):
            ...
    """

    def decorator(cls: type[IniInjectionStrategy]) -> type[IniInjectionStrategy]:
        _STRATEGIES[name] = cls
        return cls

    return decorator


def get_strategy(name: str) -> IniInjectionStrategy:
    """Get a strategy instance by name.

    Raises:
        ConfigurationError: If no strategy is registered under that name
    """
    if name not in _STRATEGIES:
        available = ", ".join(sorted(_STRATEGIES.keys()))
        raise ConfigurationError(f"Unknown ini strategy: {name}. Available: {available}")
    return _STRATEGIES[name]()


def list_strategies() -> list[str]:
    """List all registered strategy names."""
    return sorted(_STRATEGIES.keys())
