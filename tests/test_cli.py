"""
Tests for the typer CLI.

The refresh service is patched; the config file is real.
"""

from unittest.mock import patch

from typer.testing import CliRunner

from dbrefresh.domain.models import RefreshPlan, RefreshReport, StepKind, StepStatus
from dbrefresh.infrastructure.shell import CommandError
from dbrefresh.interface.cli import app, render_report

from test_config import CONFIG_YAML

SERVICE = "dbrefresh.interface.cli.RefreshService"

cli = CliRunner()


def write_config(tmp_path):
    (tmp_path / "config.yaml").write_text(CONFIG_YAML, encoding="utf-8")
    return tmp_path


def make_report(*statuses):
    report = RefreshReport(plan=RefreshPlan.from_timestamp("app", 1700000000), pod="api-1")
    for index, status in enumerate(statuses):
        report.record(f"step {index}", status)
    return report


class TestRunCommand:
    """dbrefresh run."""

    def test_success(self, tmp_path):
        write_config(tmp_path)
        with patch(SERVICE) as service_cls:
            service_cls.return_value.run.return_value = make_report(StepStatus.SUCCESS)
            result = cli.invoke(app, ["run", "--config-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Refresh complete" in result.output
        service = service_cls.return_value
        service.prepare.assert_called_once()
        service.run.assert_called_once()

    def test_options_reach_service(self, tmp_path):
        write_config(tmp_path)
        with patch(SERVICE) as service_cls:
            service_cls.return_value.run.return_value = make_report(StepStatus.SKIPPED)
            result = cli.invoke(
                app, ["run", "--config-dir", str(tmp_path), "--dry-run", "--keep-previous"]
            )

        assert result.exit_code == 0, result.output
        config, runner = service_cls.call_args.args
        assert config.keep_previous is True
        assert runner.dry_run is True

    def test_warnings_reported(self, tmp_path):
        write_config(tmp_path)
        with patch(SERVICE) as service_cls:
            service_cls.return_value.run.return_value = make_report(StepStatus.SUCCESS, StepStatus.WARNING)
            result = cli.invoke(app, ["run", "--config-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "1 warning" in result.output

    def test_failure_exits_1(self, tmp_path):
        write_config(tmp_path)
        with patch(SERVICE) as service_cls:
            service_cls.return_value.run.side_effect = CommandError("pg_dump: connection refused")
            result = cli.invoke(app, ["run", "--config-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "connection refused" in result.output

    def test_failure_shows_partial_report(self, tmp_path):
        """Steps that ran before the failure are still listed."""
        write_config(tmp_path)
        with patch(SERVICE) as service_cls:
            service = service_cls.return_value
            service.report = make_report(StepStatus.SUCCESS, StepStatus.FAILED)
            service.run.side_effect = CommandError("database is being accessed by other users")
            result = cli.invoke(app, ["run", "--config-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "Refresh of app from api-1" in result.output
        assert "step 1" in result.output
        assert "failed" in result.output
        assert "being accessed" in result.output

    def test_missing_config_exits_1(self, tmp_path):
        result = cli.invoke(app, ["run", "--config-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "config.yaml" in result.output


class TestShowConfigCommand:
    """dbrefresh show-config."""

    def test_shows_summary_without_secrets(self, tmp_path):
        write_config(tmp_path)
        with patch.dict("os.environ", {"LOCAL_PG_PASSWORD": "topsecret"}):
            result = cli.invoke(app, ["show-config", "--config-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "api-" in result.output
        assert "topsecret" not in result.output

    def test_missing_config(self, tmp_path):
        result = cli.invoke(app, ["show-config", "--config-dir", str(tmp_path)])
        assert result.exit_code == 1


def test_render_report_lists_steps():
    report = make_report(StepStatus.SUCCESS)
    report.record("remove dump", StepStatus.SUCCESS, kind=StepKind.CLEANUP)

    table = render_report(report)

    assert table.row_count == 2
