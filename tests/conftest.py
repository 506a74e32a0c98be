# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: a fake shell standing in for subprocess.run, and sample settings."""

import shlex
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from io500ctl.core.schema import ClusterSettings, RunConfiguration
from io500ctl.core.session import SessionContext

SESSION_ID = "tester20261018-1200"
CONTROLLER = "tester@daos-controller"

CLIENT_SSH_CONFIG = """\
Host daos-client-0001
    HostName 10.128.0.12
    User daos-user
Host daos-client-0002
    HostName 10.128.0.13
    User daos-user
"""


@dataclass
class Rule:
    needle: str
    returncode: int = 0
    stdout: str = ""
    times: int | None = None
    action: Callable[[list[str]], None] | None = None


class FakeShell:
    """Records every command and answers from a list of substring rules.

    Rules are checked in the order they were added; the first one whose
    needle appears in the space-joined command wins. Unmatched commands
    succeed with empty output.
    """

    def __init__(self):
        self.commands: list[list[str]] = []
        self._rules: list[Rule] = []

    def when(self, needle: str, *, returncode: int = 0, stdout: str = "", times: int | None = None, action=None):
        self._rules.append(Rule(needle, returncode, stdout, times, action))
        return self

    def __call__(self, args, **kwargs):
        cmd = list(args)
        self.commands.append(cmd)
        line = " ".join(cmd)
        for rule in self._rules:
            if rule.needle not in line:
                continue
            if rule.times is not None:
                if rule.times == 0:
                    continue
                rule.times -= 1
            if rule.action is not None:
                rule.action(cmd)
            return subprocess.CompletedProcess(cmd, rule.returncode, stdout=rule.stdout, stderr="")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    @property
    def lines(self) -> list[str]:
        return [" ".join(cmd) for cmd in self.commands]

    def matching(self, needle: str) -> list[str]:
        return [line for line in self.lines if needle in line]

    def indices(self, needle: str) -> list[int]:
        return [i for i, line in enumerate(self.lines) if needle in line]


@pytest.fixture
def fake_shell(monkeypatch):
    """Replace subprocess.run as seen by io500ctl.core.remote."""
    shell = FakeShell()
    monkeypatch.setattr("io500ctl.core.remote.subprocess.run", shell)
    return shell


@pytest.fixture
def local_repo(tmp_path) -> Path:
    """A local provisioning repository clone with one ini file."""
    repo = tmp_path / "google-cloud-daos"
    example = repo / "terraform" / "examples" / "io500"
    example.mkdir(parents=True)
    (example / "io500-isc22.config-template.daos-rf0.ini").write_text("[global]\ndatadir = /tmp/rf0\n")
    (example / "io500-isc22.config-template.daos-rf1.ini").write_text("[global]\ndatadir = /tmp/rf1\n")
    return repo


@pytest.fixture
def settings(tmp_path, local_repo) -> ClusterSettings:
    return ClusterSettings(
        ssh_user="tester",
        local_repo_dir=str(local_repo),
        results_dir=str(tmp_path / "results"),
    )


@pytest.fixture
def run_config() -> RunConfiguration:
    return RunConfiguration(iterations=3, duration_seconds=60, container_properties="rf:0")


@pytest.fixture
def session(settings) -> SessionContext:
    return SessionContext.create(settings, SESSION_ID)


class ControllerHome:
    """A directory standing in for the controller user's home.

    Installs FakeShell rules so that the commands io500ctl sends to the
    controller act on this tree: ``mkdir -p``, copying config.sh with scp,
    and the repository mirror (``rsync --delete`` honouring ``--filter=P``).
    Records whether the start script's ``-c`` config file exists when the
    script is launched.
    """

    def __init__(self, root: Path, scratch: Path, shell: FakeShell):
        self.root = root
        self.scratch = scratch
        self.config_present_at_start: list[bool] = []
        root.mkdir(parents=True, exist_ok=True)
        scratch.mkdir(parents=True, exist_ok=True)
        shell.when("rsync -az --delete", action=self._mirror)
        shell.when("mkdir -p", action=self._mkdir)
        shell.when("./start.sh", action=self._start)
        shell.when("scp ", action=self._scp)

    def path(self, remote_path: str) -> Path:
        return self.root / remote_path.split(":", 1)[-1]

    def _mirror(self, cmd: list[str]) -> None:
        source, destination = Path(cmd[-2]), self.path(cmd[-1])
        patterns = [arg.split(" ", 1)[1] for arg in cmd if arg.startswith("--filter=P ")]

        stash = Path(tempfile.mkdtemp(dir=self.scratch))
        kept: list[Path] = []
        if destination.exists():
            for pattern in patterns:
                for match in destination.glob(pattern.strip("/")):
                    relative = match.relative_to(destination)
                    (stash / relative).parent.mkdir(parents=True, exist_ok=True)
                    shutil.move(str(match), str(stash / relative))
                    kept.append(relative)
            shutil.rmtree(destination)

        shutil.copytree(source, destination)
        for relative in kept:
            saved, target = stash / relative, destination / relative
            if saved.is_dir():
                shutil.copytree(saved, target, dirs_exist_ok=True)
            elif not target.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(saved, target)

    def _mkdir(self, cmd: list[str]) -> None:
        self.path(shlex.split(cmd[-1])[-1]).mkdir(parents=True, exist_ok=True)

    def _scp(self, cmd: list[str]) -> None:
        # scp -r of client results runs on the controller itself
        if cmd[0] != "scp":
            return
        shutil.copyfile(cmd[-2], self.path(cmd[-1]))

    def _start(self, cmd: list[str]) -> None:
        words = shlex.split(cmd[-1])
        example_dir = words[words.index("cd") + 1]
        config = words[words.index("-c") + 1]
        self.config_present_at_start.append((self.root / example_dir / config).is_file())


@pytest.fixture
def controller_home(tmp_path, fake_shell) -> ControllerHome:
    return ControllerHome(tmp_path / "controller-home", tmp_path / "scratch", fake_shell)
