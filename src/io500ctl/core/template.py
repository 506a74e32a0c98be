# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Placeholder substitution.

Two flavours are used:
- substitute_placeholders(): literal ${name} replacement in shell config
  templates. No templating language; a value that itself contains
  ${...} syntax is not supported.
- expand_template(): {name} replacement in strings and lists, used for
  command templates from the settings file.
"""

from pathlib import Path
from typing import Any

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
DEFAULT_CONFIG_TEMPLATE = TEMPLATES_DIR / "remote_run.config.template"


def placeholder(name: str) -> str:
    return "${" + name + "}"


def substitute_placeholders(text: str, values: dict[str, Any]) -> str:
    """Replace every ${key} in text with str(value)."""
    result = text
    for key, value in values.items():
        result = result.replace(placeholder(key), str(value))
    return result


def unresolved_placeholders(text: str, names: list[str]) -> list[str]:
    """Names from `names` whose ${name} placeholder is still present in text."""
    return [name for name in names if placeholder(name) in text]


def expand_template(template: Any, values: dict[str, Any]) -> Any:
    """Recursively expand {param} placeholders in strings and lists.

    Args:
        template: str, list, or other object
        values: Parameter values to substitute

    Returns:
        Expanded copy; non-string leaves pass through unchanged
    """
    if isinstance(template, list):
        return [expand_template(item, values) for item in template]
    elif isinstance(template, str):
        result = template
        for key, value in values.items():
            result = result.replace(f"{{{key}}}", str(value))
        return result
    else:
        return template


def read_config_template(path: str | None = None) -> str:
    """Read the config template, falling back to the packaged default."""
    if path:
        return Path(path).read_text()
    return DEFAULT_CONFIG_TEMPLATE.read_text()
