"""
Scan service for csa-scan.

Resolves configuration, wires the remote client, SBOM generator and
lifecycle controller together, and returns the process exit code.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from csascan.api.api_client import ScanAPIClient
from csascan.api.exceptions import ConfigurationError
from csascan.api.models import APIConfig, OnFailure, OutputFormat, ScanOutcome
from csascan.core.config_manager import ConfigManager
from csascan.core.scan_request import build_scan_request
from csascan.lifecycle.controller import LifecycleSettings, ScanLifecycleController
from csascan.lifecycle.exit_codes import EXIT_FAILURE
from csascan.metadata.ci_environment import CIEnvironmentDetector
from csascan.rich_utils.ui_helpers import get_console, setup_logging
from csascan.sbom.generator import SbomGenerator
from csascan.utils.obfuscation import obfuscate_properties


class ScanService:
    """Runs one CSA scan from resolved configuration."""

    def __init__(self):
        self.config_manager = ConfigManager()
        self.ci_detector = CIEnvironmentDetector()
        self.console = get_console()
        self.logger = logging.getLogger(__name__)

    def resolve_config(self, config_path: Optional[str], overrides: Dict[str, Dict[str, Any]]) -> dict:
        """Defaults < user YAML < environment < CLI flags < detected CI metadata (gaps only)."""
        config = self.config_manager.discover_and_load_config(config_path)
        config = self.config_manager.apply_environment(config)
        config = self.config_manager.merge_config_and_args(config, overrides)

        if config["scan"].get("detect_ci_metadata", True):
            metadata = self.ci_detector.detect()
            config = self.config_manager.fill_missing(config, "scan", metadata.as_config())

        self.config_manager.validate(config)
        return config

    def build_controller(self, config: dict, client: ScanAPIClient, argv: Optional[List[str]]) -> ScanLifecycleController:
        sbom = config["sbom"]
        generator = SbomGenerator(
            tool=sbom["tool"],
            output_format=sbom["output_format"],
            output_path=sbom["output_path"],
            extra_options=sbom.get("other_options"),
            timeout=sbom.get("timeout"),
        )

        output_format = config["output"].get("format")
        settings = LifecycleSettings(
            target=config["scan"]["target"],
            on_failure=OnFailure.parse(config["scan"]["on_failure"]),
            output_format=OutputFormat.parse(output_format) if output_format else None,
            output_dir=config["output"]["directory"],
            delay_seconds=float(config["status"]["delay_seconds"]),
            max_attempts=int(config["status"]["max_attempts"]),
        )

        return ScanLifecycleController(
            client=client,
            generator=generator,
            request=build_scan_request(config, argv),
            settings=settings,
            logger=self.logger,
        )

    def execute_scan(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
        argv: Optional[List[str]] = None,
    ) -> int:
        """Execute the scan workflow and return exit code."""
        overrides = overrides or {}
        # Level is validated with the rest of the config; start at INFO until then
        setup_logging(
            level="INFO",
            verbose=bool(overrides.get("logging", {}).get("verbose")),
            console=self.console,
        )

        try:
            config = self.resolve_config(config_path, overrides)
        except ConfigurationError as e:
            self.console.print(f"❌ Configuration error: {e.message}", style="bold red")
            self.console.print("   Set SOOS_API_KEY / SOOS_CLIENT_ID or pass --api-key / --client-id", style="dim")
            return EXIT_FAILURE

        setup_logging(
            level=config["logging"]["level"],
            verbose=bool(config["logging"]["verbose"]),
            console=self.console,
        )
        self.logger.debug(f"Configuration: {json.dumps(obfuscate_properties(config), default=str)}")

        api_config = APIConfig(
            api_url=config["api"]["url"],
            api_key=config["api"]["api_key"],
            client_id=config["api"]["client_id"],
            request_timeout=int(config["api"]["request_timeout"]),
        )

        self.console.print("🚀 Starting CSA analysis...", style="bold blue")
        with ScanAPIClient(api_config) as client:
            controller = self.build_controller(config, client, argv)
            outcome = controller.run()

        self._display_outcome(outcome)
        return outcome.exit_code

    def _display_outcome(self, outcome: ScanOutcome) -> None:
        status = outcome.status.value if outcome.status else "Unknown"
        if outcome.exit_code == 0:
            self.console.print(f"✅ CSA scan finished: {status}", style="bold green")
        else:
            self.console.print(f"❌ CSA scan failed: {status}", style="bold red")
        if outcome.handle and outcome.handle.scan_url:
            self.console.print(f"📊 View your results: {outcome.handle.scan_url}", style="blue")
