"""
Exit codes for the csa-scan CLI.

- 0: scan clean, or the on-failure policy tolerates the outcome
- 1: failure surfaced to CI
"""

from csascan.api.models import OnFailure, ScanStatus

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

HARD_FAILURE_STATUSES = frozenset({ScanStatus.ERROR, ScanStatus.NO_FILES})


def exit_code_for(status: ScanStatus, has_issues: bool, on_failure: OnFailure) -> int:
    """Map a terminal status and on-failure policy to a process exit code."""
    if not status.is_terminal:
        raise ValueError(f"Scan status {status.value} is not terminal")

    if status in HARD_FAILURE_STATUSES:
        return EXIT_FAILURE

    if on_failure == OnFailure.CONTINUE:
        return EXIT_SUCCESS

    if status == ScanStatus.FINISHED and not has_issues:
        return EXIT_SUCCESS
    return EXIT_FAILURE
