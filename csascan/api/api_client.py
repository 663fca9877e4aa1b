"""
Scanning Service API Client

Handles all API interactions with the scanning service for one CSA scan:
create, upload manifest, start, poll status, update status and fetch
formatted output.
"""

import json
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import requests
import backoff

from .models import (
    SCAN_TYPE,
    APIConfig,
    AnalysisScanStatus,
    CodedMessage,
    ManifestRecord,
    OutputFormat,
    ScanHandle,
    ScanRequest,
    ScanStatus,
    UploadResult,
)
from .exceptions import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    NoManifestsAcceptedError,
)


NO_MANIFESTS_ACCEPTED = "NoManifestsAccepted"
VALIDATION_BAD_REQUEST = "ApiValidationBadRequest"


class ScanAPIClient:
    """Handles all API interactions with the scanning service"""

    def __init__(self, config: APIConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update(config.get_headers())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()

    def create_scan(self, request: ScanRequest) -> ScanHandle:
        """POST clients/{clientId}/scan-types/csa/scans"""
        endpoint = f"clients/{self.config.client_id}/scan-types/{SCAN_TYPE}/scans"
        payload = request.to_payload()
        self.logger.debug(f"Create scan request body: {json.dumps(payload)}")

        response = self._request("POST", endpoint, json=payload)
        data = response.json()
        try:
            return ScanHandle.from_response(data)
        except KeyError as e:
            raise APIError(f"Malformed create scan response, missing {e}", endpoint=endpoint)

    def upload_manifest(self, handle: ScanHandle, file_path: Path) -> UploadResult:
        """POST clients/{clientId}/projects/{projectHash}/analysis/{analysisId}/manifests"""
        endpoint = (
            f"clients/{self.config.client_id}/projects/{handle.project_hash}"
            f"/analysis/{handle.analysis_id}/manifests"
        )
        file_path = Path(file_path)
        content = file_path.read_bytes()
        files = {"file": (file_path.name, content, "application/json")}

        try:
            response = self._request("POST", endpoint, files=files)
        except APIError as e:
            if e.code == NO_MANIFESTS_ACCEPTED:
                manifests = [ManifestRecord.from_dict(m) for m in (e.body.get("manifests") or [])]
                raise NoManifestsAcceptedError(
                    e.message,
                    manifests=manifests,
                    endpoint=endpoint,
                    status_code=e.status_code,
                    body=e.body,
                )
            raise

        return UploadResult.from_response(response.json())

    def start_scan(self, handle: ScanHandle) -> None:
        """PUT clients/{clientId}/projects/{projectHash}/analysis/{analysisId}"""
        endpoint = (
            f"clients/{self.config.client_id}/projects/{handle.project_hash}"
            f"/analysis/{handle.analysis_id}"
        )
        self._request("PUT", endpoint)

    def get_scan_status(self, scan_status_url: str) -> AnalysisScanStatus:
        """GET {scanStatusUrl}"""
        response = self._request("GET", scan_status_url)
        return AnalysisScanStatus.from_response(response.json())

    def update_scan_status(self, handle: ScanHandle, status: ScanStatus, message: str) -> None:
        """PATCH clients/{clientId}/projects/{projectHash}/branches/{branchHash}/scan-types/csa/scans/{scanId}"""
        endpoint = (
            f"clients/{self.config.client_id}/projects/{handle.project_hash}"
            f"/branches/{handle.branch_hash}/scan-types/{SCAN_TYPE}/scans/{handle.analysis_id}"
        )
        self._request("PATCH", endpoint, json={"status": status.value, "message": message})

    def generate_formatted_output(
        self,
        handle: ScanHandle,
        output_format: OutputFormat,
        output_dir: str,
    ) -> Optional[Path]:
        """Fetch a formatted report and write it to output_dir.

        Returns the written path, or None when the service declines to
        produce the report for this scan.
        """
        endpoint = (
            f"clients/{self.config.client_id}/projects/{handle.project_hash}"
            f"/branches/{handle.branch_hash}/scan-types/{SCAN_TYPE}/scans/{handle.analysis_id}"
            f"/formats/{output_format.value}"
        )
        try:
            response = self._request("GET", endpoint)
        except APIError as e:
            if e.code == VALIDATION_BAD_REQUEST:
                self.logger.info(f"{output_format.value} output will not be created. {e.message}")
                return None
            raise

        output_path = Path(output_dir) / f"results.{output_format.file_type}"
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(response.json(), f, indent=2)
        return output_path

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = urljoin(self.config.api_url, endpoint)
        self.logger.debug(f"Request ({method}): {url}")
        try:
            response = self._send(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise APIConnectionError(f"Request to {endpoint} failed: {str(e)}", endpoint=endpoint)

        self.logger.debug(f"Response: {response.status_code} ({response.reason})")
        self._handle_response_errors(response, endpoint)
        return response

    @backoff.on_exception(
        backoff.expo,
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout),
        max_tries=3,
        base=1,
        max_value=60
    )
    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        return self.session.request(method, url, timeout=self.config.request_timeout, **kwargs)

    def _handle_response_errors(self, response: requests.Response, endpoint: str):
        """Handle common API response errors"""
        if response.status_code < 400:
            return

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        coded = CodedMessage.from_dict(body)

        if response.status_code == 401:
            raise AuthenticationError(
                "Invalid API key. Please check SOOS_API_KEY",
                status_code=response.status_code,
                endpoint=endpoint,
                code=coded.code,
            )
        elif response.status_code == 403:
            raise AuthenticationError(
                "Access forbidden. Your API key may not have permission for this client",
                status_code=response.status_code,
                endpoint=endpoint,
                code=coded.code,
            )
        elif response.status_code == 404:
            raise APIConnectionError(
                f"API endpoint not found: {endpoint}",
                status_code=response.status_code,
                endpoint=endpoint,
                code=coded.code,
                body=body,
            )

        error_msg = coded.message or f"HTTP {response.status_code}: {response.text[:200]}"
        error_cls = APIConnectionError if response.status_code >= 500 else APIError
        raise error_cls(
            error_msg,
            status_code=response.status_code,
            endpoint=endpoint,
            code=coded.code,
            body=body,
        )
