"""
Tests for the command-line interface
"""

from unittest.mock import patch

from typer.testing import CliRunner

from csascan import __version__
from csascan.cli.app import app


runner = CliRunner()


class TestCLI:
    """Argument parsing and exit code tests"""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    @patch("csascan.cli.commands.scan.ScanService")
    def test_scan_passes_overrides(self, mock_service_cls):
        mock_service_cls.return_value.execute_scan.return_value = 0

        result = runner.invoke(app, [
            "scan", "alpine:latest",
            "--client-id", "client-1",
            "--api-key", "secret",
            "--project-name", "demo",
            "--on-failure", "fail_the_build",
            "--output-format", "SARIF",
            "--log-level", "DEBUG",
        ])

        assert result.exit_code == 0
        kwargs = mock_service_cls.return_value.execute_scan.call_args[1]
        overrides = kwargs["overrides"]
        assert overrides["scan"]["target"] == "alpine:latest"
        assert overrides["api"]["api_key"] == "secret"
        assert overrides["scan"]["on_failure"] == "fail_the_build"
        assert overrides["output"]["format"] == "SARIF"
        assert overrides["logging"]["level"] == "DEBUG"
        assert overrides["api"]["url"] is None
        assert kwargs["config_path"] is None

    @patch("csascan.cli.commands.scan.ScanService")
    def test_scan_failure_sets_exit_code(self, mock_service_cls):
        mock_service_cls.return_value.execute_scan.return_value = 1

        result = runner.invoke(app, ["scan", "alpine:latest"])

        assert result.exit_code == 1

    def test_scan_requires_target(self):
        result = runner.invoke(app, ["scan"])

        assert result.exit_code != 0
