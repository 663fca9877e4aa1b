"""
Tests for building the create-scan request from configuration
"""

from csascan import __version__
from csascan.core.scan_request import build_contributing_developer_audit, build_scan_request


def make_config(**scan):
    scan.setdefault("project_name", "demo")
    return {
        "api": {"client_id": "client-1"},
        "scan": scan,
        "sbom": {"tool": "syft", "tool_version": "1.0.0"},
    }


class TestBuildScanRequest:
    """Scan request construction tests"""

    def test_defaults(self):
        request = build_scan_request(make_config())

        assert request.project_name == "demo"
        assert request.client_id == "client-1"
        assert request.integration_name == "None"
        assert request.integration_type == "Script"
        assert request.script_version == __version__
        assert request.tool_name == "syft"
        assert request.contributing_developer_audit == ()
        assert request.command_line is None

    def test_audit_requires_all_three_fields(self):
        assert build_contributing_developer_audit({
            "contributing_developer_id": "dev",
            "contributing_developer_source": "EnvironmentVariable",
        }) == ()

    def test_audit_included_in_payload(self):
        request = build_scan_request(make_config(
            contributing_developer_id="octocat",
            contributing_developer_source="EnvironmentVariable",
            contributing_developer_source_name="GITHUB_ACTOR",
        ))

        payload = request.to_payload()

        assert payload["contributingDeveloperAudit"] == [{
            "source": "EnvironmentVariable",
            "sourceName": "GITHUB_ACTOR",
            "contributingDeveloperId": "octocat",
        }]

    def test_payload_omits_empty_audit(self):
        assert "contributingDeveloperAudit" not in build_scan_request(make_config()).to_payload()

    def test_command_line_is_masked(self):
        request = build_scan_request(make_config(), argv=["csa-scan", "scan", "alpine", "--api-key", "secret"])

        assert "secret" not in request.command_line
        assert request.to_payload()["commandLine"] == request.command_line
