# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Command-line option parsing.

Unlike a plain argparse parser, this scanner never stops at the first bad
flag's value: every problem found is collected and reported together, so an
operator can fix the whole command line in one pass. argparse is still used
to render the usage text from the same option table.
"""

import argparse
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from marshmallow import ValidationError, validate

from io500ctl.core.errors import HelpRequested, OptionError
from io500ctl.core.schema import RunConfiguration

PROG = "io500ctl"

EXAMPLES = f"""\
Examples:
  Deploys DAOS and runs IO500 with default duration and default number of repetition

    {PROG}

  Deploys DAOS and runs IO500 for 5 minutes and repeats it 7 times, with Redundancy
  Factor set to 1, checksum enabled with CRC64, and server verify enabled

    {PROG} -s 300 -n 7 -p rf:1,cksum:crc64,srv_cksum:true -i io500-isc22.config-template.daos-rf1.ini
"""


# ASCII digits only: no sign, whitespace or digit separators
POSITIVE_INTEGER = validate.Regexp(r"[0-9]+\Z", error="must be a positive integer")


@dataclass(frozen=True)
class OptionSpec:
    """One recognized flag. metavar is None for flags that take no value."""

    dest: str
    short: str
    long: str
    metavar: str | None
    help: str
    # Checked against the raw string before schema loading
    raw_validator: Callable[[str], Any] | None = None

    @property
    def flags(self) -> str:
        return f"{self.short} or {self.long}"


OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec(
        "duration_seconds",
        "-s",
        "--seconds",
        "DURATION_IN_SECONDS",
        "Duration of each IO500 benchmark in seconds",
        POSITIVE_INTEGER,
    ),
    OptionSpec(
        "iterations",
        "-n",
        "--numberoftimes",
        "N_TIMES",
        "Number of times to repeat IO500 benchmark",
        POSITIVE_INTEGER,
    ),
    OptionSpec(
        "container_properties",
        "-p",
        "--properties",
        "DAOS_CONT_PROPS",
        "Comma-separated list of DAOS container properties (property:value), such as erasure "
        "coding and checksum configuration. See https://docs.daos.io/v2.0/user/container/#property-values",
    ),
    OptionSpec("io500_ini", "-i", "--ini", "IO500_INI", "io500 ini file name"),
    OptionSpec(
        "teardown_on_failure",
        "-t",
        "--teardown-on-failure",
        None,
        "Stop the DAOS cluster even when a run fails (default: leave it up for inspection)",
    ),
)

HELP_FLAGS = ("-h", "--help")

_OPTIONS_BY_FLAG = {flag: spec for spec in OPTIONS for flag in (spec.short, spec.long)}
_OPTIONS_BY_DEST = {spec.dest: spec for spec in OPTIONS}


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser used to render help text."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Deploys DAOS cluster and clients in GCP, runs IO500 benchmark in repetition, "
        "collects results and cleans up.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    for spec in OPTIONS:
        if spec.metavar is None:
            parser.add_argument(spec.short, spec.long, dest=spec.dest, action="store_true", help=spec.help)
        else:
            parser.add_argument(spec.short, spec.long, dest=spec.dest, metavar=spec.metavar, help=spec.help)
    return parser


def format_usage() -> str:
    """Full usage text including examples."""
    return build_parser().format_help()


def _is_missing(value: str | None) -> bool:
    """A value is missing when absent, empty, or actually the next flag.

    Negative numbers are kept as values so they fail range validation with a
    clearer message.
    """
    if not value:
        return True
    return value.startswith("-") and not value[1:].isdigit()


def parse_options(argv: Sequence[str], defaults: dict[str, Any] | None = None) -> RunConfiguration:
    """Scan argv into a RunConfiguration.

    Args:
        argv: Arguments without the program name
        defaults: Values used for options not given (e.g. from settings)

    Returns:
        Validated, immutable RunConfiguration

    Raises:
        HelpRequested: -h/--help was seen before any scan-stopping error
        OptionError: One or more problems; carries every message found
    """
    errors: list[str] = []
    raw: dict[str, Any] = dict(defaults or {})

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in HELP_FLAGS:
            raise HelpRequested()

        spec = _OPTIONS_BY_FLAG.get(arg)
        if spec is None:
            errors.append(f"ERROR: Unrecognized option '{arg}'")
            break

        if spec.metavar is None:
            raw[spec.dest] = True
            i += 1
            continue

        value = argv[i + 1] if i + 1 < len(argv) else None
        if _is_missing(value):
            errors.append(f"ERROR: Missing {spec.metavar} value for {spec.flags}")
            break

        i += 2
        if spec.raw_validator is not None:
            try:
                spec.raw_validator(value)
            except ValidationError as e:
                for message in e.messages:
                    errors.append(f"ERROR: Invalid value '{value}' for {spec.flags}: {message}")
                continue

        raw[spec.dest] = value

    try:
        config = RunConfiguration.Schema().load(raw)
    except ValidationError as e:
        for dest, messages in e.messages.items():
            spec = _OPTIONS_BY_DEST.get(dest)
            for message in messages if isinstance(messages, list) else [messages]:
                if spec is None:
                    errors.append(f"ERROR: {dest}: {message}")
                else:
                    errors.append(f"ERROR: Invalid value '{raw.get(dest)}' for {spec.flags}: {message}")
        config = None

    if errors:
        raise OptionError(errors)

    return config
