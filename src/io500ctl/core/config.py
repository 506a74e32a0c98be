# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Settings file discovery and loading.

Lookup order:
1. Explicit path passed by the caller
2. $IO500CTL_SETTINGS
3. ./io500ctl.yaml
4. Built-in defaults
"""

import logging
import os
from pathlib import Path

import yaml
from marshmallow import ValidationError

from io500ctl.core.errors import ConfigurationError
from io500ctl.core.schema import ClusterSettings

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "IO500CTL_SETTINGS"
SETTINGS_FILENAME = "io500ctl.yaml"


def find_settings_file(explicit: Path | None = None) -> Path | None:
    """Return the settings file to use, or None for built-in defaults."""
    if explicit is not None:
        if not explicit.exists():
            raise ConfigurationError(f"Settings file not found: {explicit}")
        return explicit

    env_path = os.environ.get(SETTINGS_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigurationError(f"{SETTINGS_ENV_VAR} points to a missing file: {path}")
        return path

    local = Path.cwd() / SETTINGS_FILENAME
    if local.exists():
        return local

    return None


def format_validation_errors(messages: dict | list | str, prefix: str = "") -> list[str]:
    """Flatten marshmallow's nested error messages into 'field: message' lines."""
    if isinstance(messages, str):
        return [f"{prefix}: {messages}" if prefix else messages]
    if isinstance(messages, list):
        lines = []
        for message in messages:
            lines.extend(format_validation_errors(message, prefix))
        return lines
    lines = []
    for key, value in messages.items():
        child = f"{prefix}.{key}" if prefix else str(key)
        lines.extend(format_validation_errors(value, child))
    return lines


def load_settings(path: Path | None = None) -> ClusterSettings:
    """Load ClusterSettings from the discovered settings file.

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation
    """
    settings_path = find_settings_file(path)
    if settings_path is None:
        logger.debug("No %s found, using built-in settings", SETTINGS_FILENAME)
        return ClusterSettings()

    logger.info("Loading settings from %s", settings_path)
    try:
        return ClusterSettings.from_yaml(settings_path)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse {settings_path}: {e}") from e
    except ValidationError as e:
        details = "; ".join(format_validation_errors(e.messages))
        raise ConfigurationError(f"Invalid settings in {settings_path}: {details}") from e
