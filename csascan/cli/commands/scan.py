"""
Scan command implementation.

Thin wrapper around ScanService that handles CLI argument parsing
and delegates business logic to the service layer.
"""
import sys
from typing import Optional

import typer

from csascan.core.scanner import ScanService


def scan_command(
    target: str = typer.Argument(..., help="The target to scan. A docker image name or a path to a directory."),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Client ID (overrides SOOS_CLIENT_ID)"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key (overrides SOOS_API_KEY)"),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name displayed in the scanning service"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Scanning service API URL (overrides SOOS_API_URL)"),
    on_failure: Optional[str] = typer.Option(None, "--on-failure", help="Action when the scan fails: fail_the_build, continue_on_failure"),
    output_format: Optional[str] = typer.Option(None, "--output-format", help="Formatted report to generate: SARIF"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Directory for formatted reports"),
    other_options: Optional[str] = typer.Option(None, "--other-options", help="Other options to pass to the SBOM tool"),
    branch_name: Optional[str] = typer.Option(None, "--branch-name", help="The name of the branch from the SCM system"),
    branch_uri: Optional[str] = typer.Option(None, "--branch-uri", help="The URI to the branch from the SCM system"),
    commit_hash: Optional[str] = typer.Option(None, "--commit-hash", help="The commit hash value from the SCM system"),
    build_version: Optional[str] = typer.Option(None, "--build-version", help="Version of application build artifacts"),
    build_uri: Optional[str] = typer.Option(None, "--build-uri", help="URI to CI build info"),
    operating_environment: Optional[str] = typer.Option(None, "--operating-environment", help="Operating environment, for information purposes only"),
    integration_name: Optional[str] = typer.Option(None, "--integration-name", help="Integration name"),
    integration_type: Optional[str] = typer.Option(None, "--integration-type", help="Integration type"),
    app_version: Optional[str] = typer.Option(None, "--app-version", help="App version"),
    contributing_developer_id: Optional[str] = typer.Option(None, "--contributing-developer-id", help="Contributing developer id"),
    contributing_developer_source: Optional[str] = typer.Option(None, "--contributing-developer-source", help="Where the contributing developer id came from"),
    contributing_developer_source_name: Optional[str] = typer.Option(None, "--contributing-developer-source-name", help="Name of the contributing developer source"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Minimum level to show logs: DEBUG, INFO, WARN, ERROR or FAIL"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
    config_path: Optional[str] = typer.Option(None, "-c", "--config", help="Path to config YAML"),
):
    """Run a CSA scan and report the result as the exit code."""

    overrides = {
        "api": {
            "url": api_url,
            "api_key": api_key,
            "client_id": client_id,
        },
        "scan": {
            "target": target,
            "project_name": project_name,
            "on_failure": on_failure,
            "branch_name": branch_name,
            "branch_uri": branch_uri,
            "commit_hash": commit_hash,
            "build_version": build_version,
            "build_uri": build_uri,
            "operating_environment": operating_environment,
            "integration_name": integration_name,
            "integration_type": integration_type,
            "app_version": app_version,
            "contributing_developer_id": contributing_developer_id,
            "contributing_developer_source": contributing_developer_source,
            "contributing_developer_source_name": contributing_developer_source_name,
        },
        "sbom": {
            "other_options": other_options,
        },
        "output": {
            "format": output_format,
            "directory": output_dir,
        },
        "logging": {
            "level": log_level,
            "verbose": True if verbose else None,
        },
    }

    # Delegate to service layer
    scan_service = ScanService()
    exit_code = scan_service.execute_scan(
        config_path=config_path,
        overrides=overrides,
        argv=sys.argv,
    )

    # Exit with appropriate code
    if exit_code != 0:
        sys.exit(exit_code)
