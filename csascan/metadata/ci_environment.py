"""
CI Environment Metadata Detection

Detects the CI platform the scan runs on and extracts branch, commit, build
and contributing developer information for the scan request. Values that no
CI platform provides fall back to the local Git repository.
"""

import logging
import os
import platform
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional


ENVIRONMENT_VARIABLE_SOURCE = "EnvironmentVariable"

logger = logging.getLogger(__name__)


@dataclass
class CIMetadata:
    """SCM and build details discovered from the environment"""
    platform: str = "local"
    branch_name: Optional[str] = None
    branch_uri: Optional[str] = None
    commit_hash: Optional[str] = None
    build_version: Optional[str] = None
    build_uri: Optional[str] = None
    contributing_developer_id: Optional[str] = None
    contributing_developer_source: Optional[str] = None
    contributing_developer_source_name: Optional[str] = None
    operating_environment: Optional[str] = None

    def as_config(self) -> Dict[str, Optional[str]]:
        """Keys matching the scan section of the configuration"""
        return {
            "branch_name": self.branch_name,
            "branch_uri": self.branch_uri,
            "commit_hash": self.commit_hash,
            "build_version": self.build_version,
            "build_uri": self.build_uri,
            "contributing_developer_id": self.contributing_developer_id,
            "contributing_developer_source": self.contributing_developer_source,
            "contributing_developer_source_name": self.contributing_developer_source_name,
            "operating_environment": self.operating_environment,
        }


class CIEnvironmentDetector:
    """CI/CD environment detection and metadata extraction."""

    CI_PLATFORMS = {
        "github_actions": "GITHUB_ACTIONS",
        "gitlab_ci": "GITLAB_CI",
        "jenkins": "JENKINS_URL",
        "azure_pipelines": "TF_BUILD",
        "circleci": "CIRCLECI",
    }

    def detect_platform(self) -> str:
        """Detect which CI platform is running."""
        for ci_platform, indicator in self.CI_PLATFORMS.items():
            if os.getenv(indicator):
                return ci_platform

        if os.getenv("CI") == "true" or os.getenv("CONTINUOUS_INTEGRATION") == "true":
            return "generic_ci"

        return "local"

    def detect(self, use_git: bool = True) -> CIMetadata:
        """Collect metadata for the current environment."""
        ci_platform = self.detect_platform()
        extractor = getattr(self, f"_detect_{ci_platform}", None)
        metadata = extractor() if extractor else CIMetadata(platform=ci_platform)
        metadata.operating_environment = f"{platform.system()} {platform.machine()}".strip()

        if use_git:
            if not metadata.branch_name:
                metadata.branch_name = self._git("branch", "--show-current")
            if not metadata.commit_hash:
                metadata.commit_hash = self._git("rev-parse", "HEAD")

        logger.debug(f"Detected CI platform: {ci_platform}")
        return metadata

    def _detect_github_actions(self) -> CIMetadata:
        server = os.getenv("GITHUB_SERVER_URL", "https://github.com")
        repository = os.getenv("GITHUB_REPOSITORY")
        branch = os.getenv("GITHUB_HEAD_REF") or os.getenv("GITHUB_REF_NAME") \
            or self._extract_branch_from_ref(os.getenv("GITHUB_REF"))
        run_id = os.getenv("GITHUB_RUN_ID")

        return CIMetadata(
            platform="github_actions",
            branch_name=branch,
            branch_uri=f"{server}/{repository}/tree/{branch}" if repository and branch else None,
            commit_hash=os.getenv("GITHUB_SHA"),
            build_version=os.getenv("GITHUB_RUN_NUMBER"),
            build_uri=f"{server}/{repository}/actions/runs/{run_id}" if repository and run_id else None,
            **self._developer("GITHUB_ACTOR"),
        )

    def _detect_gitlab_ci(self) -> CIMetadata:
        project_url = os.getenv("CI_PROJECT_URL")
        branch = os.getenv("CI_COMMIT_REF_NAME")

        return CIMetadata(
            platform="gitlab_ci",
            branch_name=branch,
            branch_uri=f"{project_url}/-/tree/{branch}" if project_url and branch else None,
            commit_hash=os.getenv("CI_COMMIT_SHA"),
            build_version=os.getenv("CI_PIPELINE_IID"),
            build_uri=os.getenv("CI_PIPELINE_URL"),
            **self._developer("GITLAB_USER_LOGIN"),
        )

    def _detect_jenkins(self) -> CIMetadata:
        return CIMetadata(
            platform="jenkins",
            branch_name=os.getenv("BRANCH_NAME") or self._extract_branch_from_ref(os.getenv("GIT_BRANCH")),
            commit_hash=os.getenv("GIT_COMMIT"),
            build_version=os.getenv("BUILD_NUMBER"),
            build_uri=os.getenv("BUILD_URL"),
            **self._developer("CHANGE_AUTHOR"),
        )

    def _detect_azure_pipelines(self) -> CIMetadata:
        collection_uri = os.getenv("SYSTEM_COLLECTIONURI")
        team_project = os.getenv("SYSTEM_TEAMPROJECT")
        build_id = os.getenv("BUILD_BUILDID")
        build_uri = None
        if collection_uri and team_project and build_id:
            build_uri = f"{collection_uri}{team_project}/_build/results?buildId={build_id}"

        return CIMetadata(
            platform="azure_pipelines",
            branch_name=os.getenv("BUILD_SOURCEBRANCHNAME"),
            commit_hash=os.getenv("BUILD_SOURCEVERSION"),
            build_version=os.getenv("BUILD_BUILDNUMBER"),
            build_uri=build_uri,
            **self._developer("BUILD_REQUESTEDFOREMAIL"),
        )

    def _detect_circleci(self) -> CIMetadata:
        return CIMetadata(
            platform="circleci",
            branch_name=os.getenv("CIRCLE_BRANCH"),
            commit_hash=os.getenv("CIRCLE_SHA1"),
            build_version=os.getenv("CIRCLE_BUILD_NUM"),
            build_uri=os.getenv("CIRCLE_BUILD_URL"),
            **self._developer("CIRCLE_USERNAME"),
        )

    def _developer(self, variable: str) -> Dict[str, Optional[str]]:
        developer_id = os.getenv(variable)
        if not developer_id:
            return {}
        return {
            "contributing_developer_id": developer_id,
            "contributing_developer_source": ENVIRONMENT_VARIABLE_SOURCE,
            "contributing_developer_source_name": variable,
        }

    def _extract_branch_from_ref(self, ref: Optional[str]) -> Optional[str]:
        """Extract branch name from Git ref."""
        if not ref:
            return None

        for prefix in ("refs/heads/", "origin/"):
            if ref.startswith(prefix):
                return ref[len(prefix):]
        return ref

    def _git(self, *args: str) -> Optional[str]:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                timeout=10
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None

        if result.returncode == 0:
            value = result.stdout.strip()
            return value or None
        return None
