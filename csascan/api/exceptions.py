"""
Exceptions for the CSA scan workflow.
"""

from typing import List, Optional


class CSAScanError(Exception):
    """Base scan error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(CSAScanError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class APIError(CSAScanError):
    """The scanning service rejected a request."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.endpoint = kwargs.get('endpoint')
        self.status_code = kwargs.get('status_code')
        self.code = kwargs.get('code')
        self.body = kwargs.get('body') or {}


class APIConnectionError(APIError):
    """API connection failed."""
    pass


class AuthenticationError(APIError):
    """Authentication failed."""
    pass


class NoManifestsAcceptedError(APIError):
    """The service accepted none of the uploaded manifests."""

    def __init__(self, message, manifests=None, **kwargs):
        kwargs.setdefault('code', 'NoManifestsAccepted')
        super().__init__(message, **kwargs)
        self.manifests = manifests or []


class GenerationFailedError(CSAScanError):
    """The SBOM generator exited with a non-zero code."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class PollingExhaustedError(CSAScanError):
    """The scan did not reach a terminal status within the allowed polls."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts
