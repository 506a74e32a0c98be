# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the individual orchestrator stages."""

import shutil

import pytest

from conftest import CLIENT_SSH_CONFIG, CONTROLLER, SESSION_ID
from io500ctl.cli.mixins.benchmark_stage import parse_first_client
from io500ctl.cli.orchestrate import Io500Orchestrator
from io500ctl.core.errors import ConfigurationError, ConnectivityError, ExternalToolError, RemoteExecutionError
from io500ctl.core.schema import ClusterSettings, RunConfiguration


@pytest.fixture
def orchestrator(run_config, settings, session) -> Io500Orchestrator:
    return Io500Orchestrator(config=run_config, settings=settings, session=session)


# ============================================================================
# Connectivity
# ============================================================================


class TestConnectivityStage:
    """Tests for the controller connectivity check."""

    def test_probe_succeeds(self, orchestrator, fake_shell):
        orchestrator.check_connectivity()

        assert fake_shell.lines == [f"ssh -q -o BatchMode=yes {CONTROLLER} exit"]

    def test_bootstrap_then_retry_succeeds(self, orchestrator, fake_shell):
        fake_shell.when("BatchMode=yes", returncode=255, times=1)

        orchestrator.check_connectivity()

        assert len(fake_shell.matching("BatchMode=yes")) == 2
        assert fake_shell.matching("gcloud compute ssh") == [
            "gcloud compute ssh daos-controller --project cloud-daos-perf-testing --command exit"
        ]
        assert fake_shell.indices("gcloud")[0] == 1

    def test_retry_fails(self, orchestrator, fake_shell):
        fake_shell.when("BatchMode=yes", returncode=255)

        with pytest.raises(ConnectivityError, match="daos-controller"):
            orchestrator.check_connectivity()

        # exactly one bootstrap and one retry
        assert len(fake_shell.matching("BatchMode=yes")) == 2
        assert len(fake_shell.matching("gcloud")) == 1

    def test_bootstrap_fails(self, orchestrator, fake_shell):
        fake_shell.when("BatchMode=yes", returncode=255)
        fake_shell.when("gcloud", returncode=1)

        with pytest.raises(ConnectivityError, match="SSH setup"):
            orchestrator.check_connectivity()

        assert len(fake_shell.matching("BatchMode=yes")) == 1


# ============================================================================
# Repository
# ============================================================================


class TestRepositoryStage:
    """Tests for clone-if-missing and mirror-to-controller."""

    def test_clones_when_missing(self, orchestrator, settings, fake_shell):
        shutil.rmtree(settings.local_repo_dir)

        assert orchestrator.ensure_local_repository() is True

        assert fake_shell.lines == [
            f"git clone --branch main --single-branch {settings.repo_url} {settings.local_repo_dir}"
        ]

    def test_existing_clone_skips_clone_but_still_syncs(self, orchestrator, settings, fake_shell):
        for _ in range(2):
            assert orchestrator.ensure_local_repository() is False
            orchestrator.sync_repository()

        assert fake_shell.matching("git clone") == []
        assert fake_shell.lines == [
            "rsync -az --delete "
            "--filter=P /terraform/examples/io500/results/ "
            "--filter=P /terraform/examples/io500/tmp/ "
            "--filter=P /terraform/examples/io500/.terraform/ "
            "--filter=P /terraform/examples/io500/terraform.tfstate* "
            f"{settings.local_repo_dir}/ {CONTROLLER}:google-cloud-daos/",
        ] * 2

    def test_sync_keeps_session_config(self, orchestrator, session, controller_home):
        """config.sh copied into the session folder survives the mirror that follows it."""
        orchestrator.sync_repository()
        orchestrator.setup_working_folders()
        orchestrator.generate_config()

        orchestrator.sync_repository()

        assert controller_home.path(session.remote_config_path).is_file()

    def test_sync_removes_files_deleted_locally(self, orchestrator, settings, controller_home):
        orchestrator.sync_repository()
        obsolete = settings.local_example_dir / "io500-isc22.config-template.daos-rf1.ini"
        obsolete.unlink()

        orchestrator.sync_repository()

        mirrored = controller_home.root / settings.remote_example_dir
        assert (mirrored / "io500-isc22.config-template.daos-rf0.ini").is_file()
        assert not (mirrored / obsolete.name).exists()

    def test_clone_failure_propagates(self, orchestrator, settings, fake_shell):
        shutil.rmtree(settings.local_repo_dir)
        fake_shell.when("git clone", returncode=128)

        with pytest.raises(RemoteExecutionError):
            orchestrator.ensure_local_repository()


# ============================================================================
# Config
# ============================================================================


class TestConfigStage:
    """Tests for working folders, config.sh and ini selection."""

    def test_setup_working_folders(self, orchestrator, session, fake_shell):
        orchestrator.setup_working_folders()

        assert session.local_results_dir.is_dir()
        assert fake_shell.lines == [f"ssh {CONTROLLER} mkdir -p {session.remote_results_dir}"]

    def test_generate_config(self, orchestrator, session, fake_shell):
        orchestrator.setup_working_folders()

        orchestrator.generate_config()

        rendered = session.local_config_path.read_text()
        assert f'PERF_SESSION_ID="{SESSION_ID}"' in rendered
        assert "IO500_STONEWALL_TIME=60" in rendered
        assert fake_shell.lines[-1] == f"scp {session.local_config_path} {CONTROLLER}:{session.remote_config_path}"

    def test_missing_template(self, run_config, settings, session, fake_shell, tmp_path):
        settings = ClusterSettings(
            ssh_user="tester",
            local_repo_dir=settings.local_repo_dir,
            results_dir=settings.results_dir,
            config_template=str(tmp_path / "missing.template"),
        )
        orchestrator = Io500Orchestrator(config=run_config, settings=settings, session=session)
        orchestrator.setup_working_folders()

        with pytest.raises(ConfigurationError, match="config template"):
            orchestrator.generate_config()

    def test_apply_ini_selection_overwrites(self, run_config, settings, session):
        orchestrator = Io500Orchestrator(config=run_config, settings=settings, session=session)

        orchestrator.apply_ini_selection()

        assert (settings.local_example_dir / settings.well_known_ini).read_text() == "[global]\ndatadir = /tmp/rf0\n"


# ============================================================================
# Cluster lifecycle
# ============================================================================


class TestClusterStage:
    """Tests for start.sh / stop.sh invocation."""

    def test_start_cluster(self, orchestrator, fake_shell):
        orchestrator.start_cluster()

        assert orchestrator.cluster_started is True
        assert fake_shell.lines == [
            f"ssh {CONTROLLER} cd google-cloud-daos/terraform/examples/io500 && "
            f"./start.sh -i -c results/{SESSION_ID}/config.sh"
        ]

    def test_start_failure_is_external_tool_error(self, orchestrator, fake_shell):
        fake_shell.when("./start.sh", returncode=2)

        with pytest.raises(ExternalToolError):
            orchestrator.start_cluster()

        assert orchestrator.cluster_started is False

    def test_stop_cluster(self, orchestrator, fake_shell):
        orchestrator.cluster_started = True

        orchestrator.stop_cluster()

        assert orchestrator.cluster_started is False
        assert fake_shell.lines == [f"ssh {CONTROLLER} cd google-cloud-daos/terraform/examples/io500 && ./stop.sh"]

    def test_stop_failure_is_external_tool_error(self, orchestrator, fake_shell):
        fake_shell.when("./stop.sh", returncode=1)
        with pytest.raises(ExternalToolError):
            orchestrator.stop_cluster()


# ============================================================================
# Benchmark loop
# ============================================================================


class TestParseFirstClient:
    """Tests for picking the benchmark client from the generated ssh config."""

    def test_first_match_wins(self):
        assert parse_first_client(CLIENT_SSH_CONFIG, r"^10\.") == "10.128.0.12"

    def test_no_match(self):
        assert parse_first_client("Host daos-client-0001\n    HostName 192.168.0.4\n", r"^10\.") is None

    def test_ignores_short_lines(self):
        assert parse_first_client("\n#\nHost\nHostName 10.0.0.9\n", r"^10\.") == "10.0.0.9"


class TestBenchmarkStage:
    """Tests for the run/collect/cleanup/sync loop."""

    @pytest.mark.parametrize("iterations", [1, 2, 5])
    def test_exactly_n_cycles(self, settings, session, fake_shell, iterations):
        fake_shell.when("cat ", stdout=CLIENT_SSH_CONFIG)
        config = RunConfiguration(iterations=iterations)
        orchestrator = Io500Orchestrator(config=config, settings=settings, session=session)

        records = orchestrator.run_benchmark_loop()

        assert [r.index for r in records] == list(range(iterations))
        assert len({r.local_dir for r in records}) == iterations
        assert len(fake_shell.matching("run_io500-isc22.sh")) == iterations
        assert len(fake_shell.matching("scp -r")) == iterations
        assert len(fake_shell.matching("rm -rf")) == iterations
        assert len(fake_shell.matching(f"rsync -az {CONTROLLER}:")) == iterations

    def test_iteration_command_order(self, orchestrator, session, fake_shell):
        fake_shell.when("cat ", stdout=CLIENT_SSH_CONFIG)
        record = session.iteration(0)
        ssh_config = "google-cloud-daos/terraform/examples/io500/tmp/ssh_config"

        orchestrator.run_iteration("10.128.0.12", record, "~/run_io500-isc22.sh")

        assert fake_shell.lines == [
            f"ssh {CONTROLLER} mkdir {record.remote_dir}",
            f"ssh {CONTROLLER} ssh -F {ssh_config} 10.128.0.12 '~/run_io500-isc22.sh'",
            f"ssh {CONTROLLER} scp -r -F {ssh_config} '10.128.0.12:~/io500-isc22/results/*' {record.remote_dir}/",
            f"ssh {CONTROLLER} ssh -F {ssh_config} 10.128.0.12 'rm -rf ~/io500-isc22/results/'",
            f"rsync -az {CONTROLLER}:{session.remote_results_dir}/ {session.local_results_dir}/",
        ]

    def test_parameter_strategy_passes_ini(self, run_config, local_repo, tmp_path, session, fake_shell):
        fake_shell.when("cat ", stdout=CLIENT_SSH_CONFIG)
        settings = ClusterSettings(
            ssh_user="tester",
            local_repo_dir=str(local_repo),
            results_dir=str(tmp_path / "results"),
            ini_strategy="parameter",
        )
        config = RunConfiguration(iterations=1, io500_ini="custom.ini")
        orchestrator = Io500Orchestrator(config=config, settings=settings, session=session)

        orchestrator.run_benchmark_loop()

        assert fake_shell.matching("run_io500-isc22.sh")[0].endswith("'~/run_io500-isc22.sh custom.ini'")

    def test_no_client_address(self, orchestrator, fake_shell):
        fake_shell.when("cat ", stdout="Host daos-client-0001\n")

        with pytest.raises(RemoteExecutionError, match="no client address"):
            orchestrator.run_benchmark_loop()

    def test_existing_iteration_dir_fails(self, orchestrator, fake_shell):
        """No idempotence: a reused session's iteration dir makes mkdir fail."""
        fake_shell.when("cat ", stdout=CLIENT_SSH_CONFIG)
        fake_shell.when("iteration0", returncode=1)

        with pytest.raises(RemoteExecutionError):
            orchestrator.run_benchmark_loop()

        assert fake_shell.matching("run_io500-isc22.sh") == []

    def test_benchmark_failure_stops_loop(self, orchestrator, fake_shell):
        fake_shell.when("cat ", stdout=CLIENT_SSH_CONFIG)
        fake_shell.when("run_io500-isc22.sh", returncode=1)

        with pytest.raises(RemoteExecutionError):
            orchestrator.run_benchmark_loop()

        assert fake_shell.matching("scp -r") == []
        assert len(fake_shell.matching("run_io500-isc22.sh")) == 1
