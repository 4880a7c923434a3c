"""Tests for the measure runner: settings, flags, reports and CLI.

Ejecutar:
    pytest tests/test_measure_job.py -v
"""

import json
from datetime import datetime
from unittest.mock import patch

import pandas as pd
import pytest

from common.config import get_settings
from jobs.measure.cli import build_parser, main
from jobs.measure.config import MeasureRunConfig
from jobs.measure.report import format_summary, write_reports
from jobs.measure.runner import run_measure
from latency_measure import measure_targets
from latency_measure.core.domain.errors import NoTargetsError, PlatformLookupError
from latency_measure.core.domain.target import Target

NOW = datetime(2024, 3, 1, 12, 30, 0)


def _cfg(tmp_path, **overrides):
    values = dict(
        svc_prefix="svc",
        svc_range="1,3",
        namespace="ns",
        namespace_prefix=None,
        namespace_range=None,
        concurrency=2,
        output_dir=str(tmp_path),
        verbose=False,
    )
    values.update(overrides)
    return MeasureRunConfig(**values)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in (
        "MEASURE_CONCURRENCY", "MEASURE_OUTPUT_DIR", "KUBECTL_BIN", "KUBE_CONTEXT",
        "MEASURE_LOOKUP_TIMEOUT_SECONDS", "MEASURE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MEASURE_ENV_FILE", str(tmp_path / "missing.env"))
    return monkeypatch


# =============================================================================
# SETTINGS
# =============================================================================

class TestSettings:

    def test_defaults(self, clean_env):
        s = get_settings()

        assert s.concurrency == 10
        assert s.output_dir == "."
        assert s.kubectl_bin == "kubectl"
        assert s.kube_context is None
        assert s.lookup_timeout_seconds == 30.0
        assert s.log_level == "INFO"

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("MEASURE_CONCURRENCY", "32")
        clean_env.setenv("KUBE_CONTEXT", "bench")
        clean_env.setenv("MEASURE_LOG_LEVEL", "debug")

        s = get_settings()

        assert s.concurrency == 32
        assert s.kube_context == "bench"
        assert s.log_level == "DEBUG"

    def test_env_file_loaded(self, clean_env, tmp_path):
        env_file = tmp_path / "measure.env"
        env_file.write_text("MEASURE_OUTPUT_DIR=/tmp/results\n")
        clean_env.setenv("MEASURE_ENV_FILE", str(env_file))
        # registered so teardown removes the value loaded from the file
        clean_env.setenv("MEASURE_OUTPUT_DIR", "unset")
        clean_env.delenv("MEASURE_OUTPUT_DIR")

        assert get_settings().output_dir == "/tmp/results"


# =============================================================================
# RUN CONFIG
# =============================================================================

class TestRunConfig:

    def test_valid_explicit_range(self, tmp_path):
        _cfg(tmp_path).validate()

    def test_valid_discovery(self, tmp_path):
        _cfg(tmp_path, namespace=None, svc_range=None,
             namespace_prefix="ns", namespace_range="1,2").validate()

    def test_requires_a_source(self, tmp_path):
        with pytest.raises(ValueError, match="requires --namespace"):
            _cfg(tmp_path, namespace=None).validate()

    def test_namespace_requires_range(self, tmp_path):
        with pytest.raises(ValueError, match="--range is required"):
            _cfg(tmp_path, svc_range=None).validate()

    def test_concurrency_positive(self, tmp_path):
        with pytest.raises(ValueError, match="positive integer"):
            _cfg(tmp_path, concurrency=0).validate()


# =============================================================================
# REPORTS
# =============================================================================

class TestReports:

    def test_all_files_written(self, platform, t0, tmp_path):
        platform.add_ready_service("svc-2", "ns", t0, overall_seconds=8)
        platform.add_ready_service("svc-1", "ns", t0, overall_seconds=4)
        outcome = measure_targets(platform, [Target("svc-2", "ns"), Target("svc-1", "ns")], 2)

        paths = write_reports(outcome, str(tmp_path), now=NOW)

        assert set(paths) == {"raw_csv", "csv", "json", "html"}
        assert paths["csv"].name == "20240301123000_ksvc_creation_time.csv"
        assert paths["raw_csv"].name == "20240301123000_raw_ksvc_creation_time.csv"

        df = pd.read_csv(paths["csv"])
        assert list(df.columns) == outcome.duration_header
        assert list(df["svc_name"]) == ["svc-1", "svc-2"]
        assert list(df["overall_ready"]) == [4, 8]

        raw = pd.read_csv(paths["raw_csv"])
        assert list(raw.columns) == outcome.raw_header

        data = json.loads(paths["json"].read_text())
        assert data["service"]["ready"] == 2
        assert data["overall"]["average"] == 6.0
        assert data["platform"]["ingress_controller"] == "Kourier"

        assert "<table" in paths["html"].read_text()

    def test_failing_writer_is_skipped(self, platform, ready_target, tmp_path):
        outcome = measure_targets(platform, [ready_target], 1)

        with patch("jobs.measure.report.write_json", side_effect=OSError("disk full")):
            paths = write_reports(outcome, str(tmp_path), now=NOW)

        assert set(paths) == {"raw_csv", "csv", "html"}

    def test_output_dir_created(self, platform, ready_target, tmp_path):
        outcome = measure_targets(platform, [ready_target], 1)
        target_dir = tmp_path / "nested" / "out"

        write_reports(outcome, str(target_dir), now=NOW)

        assert target_dir.is_dir()


class TestSummary:

    def test_summary_with_statistics(self, platform, ready_target):
        agg = measure_targets(platform, [ready_target, Target("svc-404", "ns")], 2).aggregate

        text = "\n".join(format_summary(agg))

        assert "Serving: v1.12.0" in text
        assert "Ready: 1 (50.00%)" in text
        assert "NotFound: 1 (50.00%)" in text
        assert "Percentile99: 5.000000s" in text
        assert "Service Route Ready Duration:" in text

    def test_summary_without_ready(self, platform):
        agg = measure_targets(platform, [Target("svc-404", "ns")], 1).aggregate

        lines = format_summary(agg)

        assert lines[-1] == "Total: 1 | Ready: 0 NotReady: 0 NotFound: 1 Fail: 0"
        assert not any(line.startswith("Percentile") for line in lines)

    def test_tree_levels(self, platform, ready_target):
        agg = measure_targets(platform, [ready_target], 1).aggregate

        lines = format_summary(agg)

        assert "  - Service PodAutoscaler Active Duration:" in lines
        assert "    - Service ServerlessService Ready Duration:" in lines
        assert "      - Service ServerlessService ActivatorEndpointsPopulated Duration:" in lines
        assert "      - Service ServerlessService EndpointsPopulated Duration:" in lines
        assert "      - Service Pod queue-proxy Started Duration:" in lines

    def test_partial_count_reported(self, platform, t0):
        platform.add_ready_service("svc-1", "ns", t0, with_pod=False)
        agg = measure_targets(platform, [Target("svc-1", "ns")], 1).aggregate

        assert format_summary(agg)[-1] == "Partial samples (no pod observed): 1"


# =============================================================================
# RUNNER + CLI
# =============================================================================

class TestRunner:

    def test_reports_written_when_ready(self, platform, t0, tmp_path, capsys):
        platform.add_ready_service("svc-1", "ns", t0)

        outcome = run_measure(_cfg(tmp_path), client=platform)

        assert outcome.aggregate.counts.ready == 1
        assert outcome.aggregate.counts.not_found == 2
        assert len(list(tmp_path.glob("*_ksvc_creation_time.csv"))) == 1
        assert "Overall Service Ready Measurement:" in capsys.readouterr().out

    def test_no_reports_without_ready(self, platform, tmp_path):
        run_measure(_cfg(tmp_path), client=platform)

        assert list(tmp_path.iterdir()) == []

    def test_discovery_without_services(self, platform, tmp_path):
        cfg = _cfg(tmp_path, namespace=None, svc_range=None,
                   namespace_prefix="empty", namespace_range="1,2")

        with pytest.raises(NoTargetsError):
            run_measure(cfg, client=platform)

    def test_invalid_flags(self, platform, tmp_path):
        with pytest.raises(ValueError):
            run_measure(_cfg(tmp_path, svc_range="1-3"), client=platform)

    def test_output_file_aborts_before_lookups(self, platform, t0, tmp_path):
        platform.add_ready_service("svc-1", "ns", t0)
        not_a_dir = tmp_path / "results.txt"
        not_a_dir.write_text("x")

        with pytest.raises(OSError):
            run_measure(_cfg(tmp_path, output_dir=str(not_a_dir)), client=platform)

        assert platform.calls == []
        assert not_a_dir.read_text() == "x"

    def test_resolved_output_dir_used_for_reports(self, platform, t0, tmp_path):
        platform.add_ready_service("svc-1", "ns", t0)
        nested = tmp_path / "a" / "b"

        run_measure(_cfg(tmp_path, output_dir=str(nested)), client=platform)

        assert len(list(nested.glob("*_ksvc_creation_time.json"))) == 1


class TestCli:

    def test_parser_flags(self):
        args = build_parser().parse_args([
            "--svc-prefix", "svc", "-r", "1,20", "--namespace", "ns", "-c", "4", "-v",
        ])

        assert args.svc_prefix == "svc"
        assert args.svc_range == "1,20"
        assert args.concurrency == 4
        assert args.verbose is True
        assert args.output == "."

    def test_main_builds_config(self, clean_env):
        clean_env.setenv("KUBE_CONTEXT", "from-env")
        with patch("jobs.measure.cli.run_measure") as run:
            code = main(["--namespace", "ns", "-r", "1,2", "--lookup-timeout", "5"])

        assert code == 0
        cfg = run.call_args[0][0]
        assert cfg.namespace == "ns"
        assert cfg.concurrency == 10
        assert cfg.kube_context == "from-env"
        assert cfg.lookup_timeout_seconds == 5.0

    @pytest.mark.parametrize("error,code", [
        (NoTargetsError(), 1),
        (ValueError("bad range"), 2),
        (PlatformLookupError("services", "*", "ns-1", "down"), 2),
    ])
    def test_main_exit_codes(self, clean_env, error, code):
        with patch("jobs.measure.cli.run_measure", side_effect=error):
            assert main(["--namespace", "ns", "-r", "1,2"]) == code

    def test_main_output_file_exits_cleanly(self, clean_env, tmp_path):
        not_a_dir = tmp_path / "results.txt"
        not_a_dir.write_text("x")

        with patch("jobs.measure.runner.build_client") as build:
            code = main(["--namespace", "ns", "-r", "1,2", "-o", str(not_a_dir)])

        assert code == 2
        build.assert_not_called()
