"""
Tests for scan workflow data models
"""

import pytest

from csascan.api.models import (
    AnalysisScanStatus,
    ManifestRecord,
    ManifestStatus,
    OnFailure,
    OutputFormat,
    PackageManagerType,
    ScanHandle,
    ScanStatus,
)


class TestScanStatus:
    """Status parsing and classification tests"""

    def test_parse_is_case_insensitive(self):
        assert ScanStatus.parse("failedwithissues") == ScanStatus.FAILED_WITH_ISSUES

    @pytest.mark.parametrize("value", [None, "", "Exploded"])
    def test_parse_unknown(self, value):
        assert ScanStatus.parse(value) == ScanStatus.UNKNOWN

    def test_terminal_statuses(self):
        terminal = {status for status in ScanStatus if status.is_terminal}
        assert terminal == {
            ScanStatus.FINISHED,
            ScanStatus.FAILED_WITH_ISSUES,
            ScanStatus.INCOMPLETE,
            ScanStatus.ERROR,
            ScanStatus.NO_FILES,
        }

    def test_analysis_statuses(self):
        assert ScanStatus.INCOMPLETE.has_analysis
        assert not ScanStatus.ERROR.has_analysis
        assert not ScanStatus.NO_FILES.has_analysis


class TestOptions:
    """Option enum parsing tests"""

    def test_on_failure_parse(self):
        assert OnFailure.parse("fail_the_build") == OnFailure.FAIL
        with pytest.raises(ValueError, match="Valid options"):
            OnFailure.parse("never")

    def test_output_format_parse(self):
        assert OutputFormat.parse("sarif") == OutputFormat.SARIF
        assert OutputFormat.SARIF.file_type == "sarif.json"
        with pytest.raises(ValueError):
            OutputFormat.parse("html")


class TestResponseModels:
    """Response parsing tests"""

    def test_scan_handle_falls_back_to_analysis_id(self):
        handle = ScanHandle.from_response({
            "projectHash": "p",
            "branchHash": "b",
            "analysisId": "a",
            "scanStatusUrl": "s",
        })
        assert handle.analysis_id == "a"
        assert handle.scan_url == ""

    def test_status_without_counts(self):
        status = AnalysisScanStatus.from_response({"status": "Finished"})

        assert status.is_success
        assert not status.has_issues
        assert status.errors == []

    def test_manifest_record_unknown_enums(self):
        record = ManifestRecord.from_dict({"name": "x", "packageManager": "Cobol", "status": "Weird"})

        assert record.package_manager == PackageManagerType.UNKNOWN
        assert record.status == ManifestStatus.UNKNOWN
        assert not record.is_valid
