"""
Scan Lifecycle Controller

Drives one CSA scan from creation to a terminal outcome:

create -> generate SBOM -> upload manifest -> start -> poll -> output -> exit code

Every failure is handled here. When a scan already exists on the service
and no terminal status has been reported for it, the controller marks it as
Error (best effort) before returning a failing exit code.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from csascan.api.models import (
    AnalysisScanStatus,
    LifecycleStage,
    OnFailure,
    OutputFormat,
    ScanHandle,
    ScanOutcome,
    ScanRequest,
    ScanStatus,
    UploadResult,
)
from csascan.api.exceptions import (
    CSAScanError,
    GenerationFailedError,
    NoManifestsAcceptedError,
    PollingExhaustedError,
)
from csascan.lifecycle.exit_codes import EXIT_FAILURE, exit_code_for


DEFAULT_DELAY_SECONDS = 5
DEFAULT_MAX_ATTEMPTS = 10


@dataclass
class LifecycleSettings:
    """Per-run settings consumed by the controller"""
    target: str
    on_failure: OnFailure = OnFailure.CONTINUE
    output_format: Optional[OutputFormat] = None
    output_dir: str = "./results"
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    # 0 polls until a terminal status is reached
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


class ScanLifecycleController:
    """Sequences the remote client and SBOM generator for a single scan."""

    def __init__(
        self,
        client,
        generator,
        request: ScanRequest,
        settings: LifecycleSettings,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            client: Remote scan client (see ScanAPIClient)
            generator: SBOM generator with a generate(target) -> Path method
            request: Scan creation request
            settings: Target, policy, output and polling settings
            logger: Logger to report progress on
            sleep: Suspend primitive used between status polls
        """
        self.client = client
        self.generator = generator
        self.request = request
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep

        self.stage = LifecycleStage.CREATED
        self.handle: Optional[ScanHandle] = None
        self._status_reported = False

    def run(self) -> ScanOutcome:
        """Run the whole lifecycle and return its outcome. Never raises CSAScanError."""
        try:
            self.handle = self._create_scan()
            result_path = self._generate()
            self._upload(result_path)
            self._start()
            scan_status = self._poll()
            return self._finish(scan_status)

        except NoManifestsAcceptedError as e:
            return self._no_files(e)

        except PollingExhaustedError as e:
            self.logger.error(f"Scan status polling exhausted: {e.message}")
            return self._fail(e, "Timed out waiting for the scan to complete.")

        except GenerationFailedError as e:
            self.logger.error(f"SBOM generation failed: {e.message}")
            return self._fail(e, f"Error while generating the SBOM: {e.message}")

        except CSAScanError as e:
            self.logger.error(f"Error: {e.message}")
            return self._fail(e, "Error while performing scan.")

        except OSError as e:
            self.logger.error(f"File error: {e}")
            return self._fail(e, "Error while performing scan.")

    def _create_scan(self) -> ScanHandle:
        self.logger.info(f"Creating scan for project '{self.request.project_name}'...")
        handle = self.client.create_scan(self.request)

        self.logger.info(f"Project Hash: {handle.project_hash}")
        self.logger.info(f"Branch Hash: {handle.branch_hash}")
        self.logger.info(f"Scan Id: {handle.analysis_id}")
        self.logger.info("Scan created successfully.")
        self.stage = LifecycleStage.GENERATING
        return handle

    def _generate(self) -> Path:
        self.logger.info(f"Generating SBOM for '{self.settings.target}'")
        result_path = self.generator.generate(self.settings.target)
        self.logger.info("SBOM generation completed successfully")
        self.stage = LifecycleStage.UPLOADING
        return result_path

    def _upload(self, result_path: Path) -> UploadResult:
        self.logger.info(f"Uploading {result_path}")
        upload_result = self.client.upload_manifest(self.handle, result_path)

        self.logger.info(f"Manifest upload: {upload_result.message}")
        for manifest in upload_result.manifests:
            log = self.logger.info if manifest.is_valid else self.logger.warning
            log(
                f"  {manifest.name} ({manifest.package_manager.value}): "
                f"{manifest.status.value} {manifest.status_message}".rstrip()
            )
        self.stage = LifecycleStage.STARTING
        return upload_result

    def _start(self) -> None:
        self.logger.info("Starting analysis scan")
        self.client.start_scan(self.handle)
        self.logger.info(
            f"Analysis scan started successfully, to see the results visit: {self.handle.scan_url}"
        )
        self.stage = LifecycleStage.POLLING

    def _poll(self) -> AnalysisScanStatus:
        """Poll with a fixed delay until the status is terminal or attempts run out."""
        attempts = 0
        while True:
            scan_status = self.client.get_scan_status(self.handle.scan_status_url)
            if scan_status.is_complete:
                return scan_status

            attempts += 1
            if self.settings.max_attempts and attempts >= self.settings.max_attempts:
                raise PollingExhaustedError(
                    f"Scan still {scan_status.status.value} after {attempts} status checks",
                    attempts=attempts,
                )

            self.logger.info(
                f"Scan status: {scan_status.status.value}. "
                f"Checking again in {self.settings.delay_seconds} seconds..."
            )
            self.sleep(self.settings.delay_seconds)

    def _finish(self, scan_status: AnalysisScanStatus) -> ScanOutcome:
        self.stage = LifecycleStage.DONE
        self._status_reported = True
        status = scan_status.status

        self.logger.info(f"Scan status: {status.value}")
        self.logger.info(
            f"Violations found: {scan_status.violation_count}, "
            f"Vulnerabilities found: {scan_status.vulnerability_count}"
        )
        for error in scan_status.errors:
            self.logger.error(f"{error.code}: {error.message}")

        if self.settings.output_format and status.has_analysis:
            self._generate_output(self.settings.output_format)

        exit_code = exit_code_for(status, scan_status.has_issues, self.settings.on_failure)
        if exit_code == 0:
            self.logger.info(f"Scan completed: {status.value}")
        else:
            self.logger.error(
                f"Scan completed with status {status.value} "
                f"(on failure: {self.settings.on_failure.value})"
            )
        return ScanOutcome(
            stage=self.stage,
            exit_code=exit_code,
            status=status,
            handle=self.handle,
        )

    def _generate_output(self, output_format: OutputFormat) -> None:
        try:
            self.logger.info(f"Generating {output_format.value} report")
            output_path = self.client.generate_formatted_output(
                self.handle, output_format, self.settings.output_dir
            )
            if output_path:
                self.logger.info(f"{output_format.value} report written to {output_path}")
        except (CSAScanError, OSError) as e:
            self.logger.warning(f"Could not generate {output_format.value} report: {e}")

    def _no_files(self, error: NoManifestsAcceptedError) -> ScanOutcome:
        self.logger.error(f"No manifests were accepted: {error.message}")
        for manifest in error.manifests:
            self.logger.error(f"  {manifest.name}: {manifest.status_message}")

        self._report_status(ScanStatus.NO_FILES, error.message or "No manifests accepted.")
        self.stage = LifecycleStage.DONE
        return ScanOutcome(
            stage=self.stage,
            exit_code=exit_code_for(ScanStatus.NO_FILES, False, self.settings.on_failure),
            status=ScanStatus.NO_FILES,
            handle=self.handle,
            error=error.message,
        )

    def _fail(self, error: Exception, message: str) -> ScanOutcome:
        if self.handle is None:
            self.stage = LifecycleStage.ABORTED
        else:
            self.stage = LifecycleStage.FAILED
            self._report_status(ScanStatus.ERROR, message)

        return ScanOutcome(
            stage=self.stage,
            exit_code=EXIT_FAILURE,
            status=ScanStatus.ERROR,
            handle=self.handle,
            error=str(error),
        )

    def _report_status(self, status: ScanStatus, message: str) -> None:
        """Best-effort remote status update; never raises."""
        if self.handle is None or self._status_reported:
            return
        self._status_reported = True
        try:
            self.client.update_scan_status(self.handle, status, message)
        except CSAScanError as e:
            self.logger.warning(f"Could not update scan status to {status.value}: {e}")
