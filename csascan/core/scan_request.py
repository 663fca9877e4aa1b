"""
Scan request construction.

Builds the immutable ScanRequest from a resolved configuration.
"""
from typing import List, Optional

from csascan import __version__
from csascan.api.models import ContributingDeveloperAudit, ScanRequest
from csascan.utils.obfuscation import obfuscate_command_line


def build_contributing_developer_audit(scan_config: dict) -> tuple:
    """One audit record when source, source name and developer id are all set, otherwise none."""
    source = scan_config.get("contributing_developer_source")
    source_name = scan_config.get("contributing_developer_source_name")
    developer_id = scan_config.get("contributing_developer_id")
    if not (source and source_name and developer_id):
        return ()
    return (
        ContributingDeveloperAudit(
            source=source,
            source_name=source_name,
            contributing_developer_id=developer_id,
        ),
    )


def build_scan_request(config: dict, argv: Optional[List[str]] = None) -> ScanRequest:
    """Build the create-scan request from config; argv is recorded with secrets masked."""
    scan = config.get("scan") or {}
    sbom = config.get("sbom") or {}

    return ScanRequest(
        project_name=scan["project_name"],
        client_id=config["api"]["client_id"],
        commit_hash=scan.get("commit_hash"),
        branch_name=scan.get("branch_name"),
        branch_uri=scan.get("branch_uri"),
        build_version=scan.get("build_version"),
        build_uri=scan.get("build_uri"),
        integration_name=scan.get("integration_name") or "None",
        integration_type=scan.get("integration_type") or "Script",
        operating_environment=scan.get("operating_environment"),
        app_version=scan.get("app_version"),
        script_version=__version__,
        tool_name=sbom.get("tool") or "syft",
        tool_version=sbom.get("tool_version"),
        contributing_developer_audit=build_contributing_developer_audit(scan),
        command_line=obfuscate_command_line(argv) if argv else None,
    )
