"""
Scanning service API package.

Remote operations used by one CSA scan:

create scan -> upload manifest -> start scan -> poll status
update status and formatted output are used at the end of the run.
"""

from .api_client import ScanAPIClient
from .exceptions import (
    CSAScanError,
    ConfigurationError,
    APIError,
    APIConnectionError,
    AuthenticationError,
    NoManifestsAcceptedError,
    GenerationFailedError,
    PollingExhaustedError,
)

__all__ = [
    'ScanAPIClient',
    'CSAScanError',
    'ConfigurationError',
    'APIError',
    'APIConnectionError',
    'AuthenticationError',
    'NoManifestsAcceptedError',
    'GenerationFailedError',
    'PollingExhaustedError',
]
