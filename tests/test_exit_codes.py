"""
Tests for the exit-code policy.

Every terminal scan status is checked against both on-failure policies.
"""

import pytest

from csascan.api.models import OnFailure, ScanStatus
from csascan.lifecycle.exit_codes import EXIT_FAILURE, EXIT_SUCCESS, exit_code_for


@pytest.mark.parametrize("status,has_issues,on_failure,expected", [
    (ScanStatus.FINISHED, False, OnFailure.CONTINUE, EXIT_SUCCESS),
    (ScanStatus.FINISHED, False, OnFailure.FAIL, EXIT_SUCCESS),
    (ScanStatus.FINISHED, True, OnFailure.CONTINUE, EXIT_SUCCESS),
    (ScanStatus.FINISHED, True, OnFailure.FAIL, EXIT_FAILURE),
    (ScanStatus.FAILED_WITH_ISSUES, True, OnFailure.CONTINUE, EXIT_SUCCESS),
    (ScanStatus.FAILED_WITH_ISSUES, True, OnFailure.FAIL, EXIT_FAILURE),
    (ScanStatus.INCOMPLETE, False, OnFailure.CONTINUE, EXIT_SUCCESS),
    (ScanStatus.INCOMPLETE, False, OnFailure.FAIL, EXIT_FAILURE),
    (ScanStatus.ERROR, False, OnFailure.CONTINUE, EXIT_FAILURE),
    (ScanStatus.ERROR, False, OnFailure.FAIL, EXIT_FAILURE),
    (ScanStatus.NO_FILES, False, OnFailure.CONTINUE, EXIT_FAILURE),
    (ScanStatus.NO_FILES, False, OnFailure.FAIL, EXIT_FAILURE),
])
def test_exit_code_matrix(status, has_issues, on_failure, expected):
    assert exit_code_for(status, has_issues, on_failure) == expected


def test_failed_with_issues_ignores_issue_flag_under_fail_policy():
    """FailedWithIssues fails the build even when the counts are zero"""
    assert exit_code_for(ScanStatus.FAILED_WITH_ISSUES, False, OnFailure.FAIL) == EXIT_FAILURE


@pytest.mark.parametrize("status", [
    ScanStatus.UNKNOWN,
    ScanStatus.QUEUED,
    ScanStatus.MANIFEST,
    ScanStatus.LOCATING_DEPENDENCIES,
    ScanStatus.LOADING_PACKAGE_DETAILS,
    ScanStatus.LOCATING_VULNERABILITIES,
    ScanStatus.RUNNING_GOVERNANCE_POLICIES,
])
def test_non_terminal_status_is_rejected(status):
    with pytest.raises(ValueError):
        exit_code_for(status, False, OnFailure.CONTINUE)
