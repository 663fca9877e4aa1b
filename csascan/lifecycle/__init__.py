"""
Scan lifecycle: state machine, status polling and exit-code policy.
"""

from csascan.lifecycle.controller import LifecycleSettings, ScanLifecycleController
from csascan.lifecycle.exit_codes import EXIT_FAILURE, EXIT_SUCCESS, exit_code_for

__all__ = [
    "LifecycleSettings",
    "ScanLifecycleController",
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "exit_code_for",
]
