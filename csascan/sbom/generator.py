"""
SBOM generator invocation.

Runs the external SBOM tool (syft by default) as a child process against a
scan target and writes its output to a well-known path.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from csascan.api.exceptions import GenerationFailedError


DEFAULT_TOOL = "syft"
DEFAULT_OUTPUT_FORMAT = "json"
DEFAULT_OUTPUT_PATH = "./results/results.csa.json"

logger = logging.getLogger(__name__)


class SbomGenerator:
    """Runs the SBOM tool once per scan"""

    def __init__(
        self,
        tool: str = DEFAULT_TOOL,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        output_path: str = DEFAULT_OUTPUT_PATH,
        extra_options: Optional[str] = None,
        capture_output: bool = False,
        timeout: Optional[int] = None,
    ):
        self.tool = tool
        self.output_format = output_format
        self.output_path = Path(output_path)
        self.extra_options = extra_options
        self.capture_output = capture_output
        self.timeout = timeout

    def build_command(self, target: str) -> List[str]:
        """<tool> <target> -o <format>=<path> [extra options...]"""
        command = [self.tool, target, "-o", f"{self.output_format}={self.output_path}"]
        if self.extra_options:
            command.extend(shlex.split(self.extra_options))
        return command

    def generate(self, target: str) -> Path:
        """
        Run the tool against target.

        Args:
            target: Image name or directory to scan

        Returns:
            Path of the generated result file

        Raises:
            GenerationFailedError: the tool is missing, timed out or exited non-zero
        """
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        command = self.build_command(target)
        logger.info(f"Running {self.tool} with args: {' '.join(command[1:])}")

        try:
            result = subprocess.run(
                command,
                capture_output=self.capture_output,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise GenerationFailedError(f"{self.tool}: executable not found", returncode=127)
        except subprocess.TimeoutExpired:
            raise GenerationFailedError(f"{self.tool}: timed out after {self.timeout} seconds")

        logger.debug(f"{self.tool}: child process exited with code {result.returncode}")
        if self.capture_output:
            if result.stdout:
                logger.debug(result.stdout.strip())
            if result.stderr:
                logger.debug(result.stderr.strip())

        if result.returncode != 0:
            raise GenerationFailedError(
                f"{self.tool}: child process exited with code {result.returncode}",
                returncode=result.returncode,
            )

        if not self.output_path.exists():
            raise GenerationFailedError(f"{self.tool}: no result file written to {self.output_path}")

        return self.output_path
