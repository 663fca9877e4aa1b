"""
Tests for CI environment metadata detection
"""

import os
from unittest.mock import patch

from csascan.metadata.ci_environment import CIEnvironmentDetector, CIMetadata


class TestCIEnvironmentDetector:
    """Platform detection and metadata extraction tests"""

    def setup_method(self):
        """Setup for each test"""
        self.detector = CIEnvironmentDetector()

    def test_detect_platform_local(self):
        with patch.dict(os.environ, {}, clear=True):
            assert self.detector.detect_platform() == "local"

    def test_detect_platform_generic_ci(self):
        with patch.dict(os.environ, {"CI": "true"}, clear=True):
            assert self.detector.detect_platform() == "generic_ci"

    def test_detect_github_actions(self):
        env = {
            "GITHUB_ACTIONS": "true",
            "GITHUB_SERVER_URL": "https://github.com",
            "GITHUB_REPOSITORY": "acme/api",
            "GITHUB_REF": "refs/heads/feature/login",
            "GITHUB_SHA": "abc123",
            "GITHUB_RUN_ID": "42",
            "GITHUB_RUN_NUMBER": "7",
            "GITHUB_ACTOR": "octocat",
        }
        with patch.dict(os.environ, env, clear=True):
            metadata = self.detector.detect(use_git=False)

        assert metadata.platform == "github_actions"
        assert metadata.branch_name == "feature/login"
        assert metadata.branch_uri == "https://github.com/acme/api/tree/feature/login"
        assert metadata.commit_hash == "abc123"
        assert metadata.build_version == "7"
        assert metadata.build_uri == "https://github.com/acme/api/actions/runs/42"
        assert metadata.contributing_developer_id == "octocat"
        assert metadata.contributing_developer_source == "EnvironmentVariable"
        assert metadata.contributing_developer_source_name == "GITHUB_ACTOR"
        assert metadata.operating_environment

    def test_detect_gitlab_ci(self):
        env = {
            "GITLAB_CI": "true",
            "CI_PROJECT_URL": "https://gitlab.com/acme/api",
            "CI_COMMIT_REF_NAME": "main",
            "CI_COMMIT_SHA": "def456",
            "CI_PIPELINE_IID": "12",
            "CI_PIPELINE_URL": "https://gitlab.com/acme/api/-/pipelines/99",
        }
        with patch.dict(os.environ, env, clear=True):
            metadata = self.detector.detect(use_git=False)

        assert metadata.platform == "gitlab_ci"
        assert metadata.branch_uri == "https://gitlab.com/acme/api/-/tree/main"
        assert metadata.commit_hash == "def456"
        assert metadata.contributing_developer_id is None

    def test_jenkins_strips_origin_prefix(self):
        env = {"JENKINS_URL": "https://ci.local", "GIT_BRANCH": "origin/develop", "GIT_COMMIT": "777"}
        with patch.dict(os.environ, env, clear=True):
            metadata = self.detector.detect(use_git=False)

        assert metadata.platform == "jenkins"
        assert metadata.branch_name == "develop"

    def test_local_falls_back_to_git(self):
        with patch.dict(os.environ, {}, clear=True), \
                patch.object(CIEnvironmentDetector, "_git", side_effect=["main", "cafebabe"]) as mock_git:
            metadata = self.detector.detect()

        assert metadata.platform == "local"
        assert metadata.branch_name == "main"
        assert metadata.commit_hash == "cafebabe"
        assert mock_git.call_count == 2

    def test_git_not_installed(self):
        with patch("csascan.metadata.ci_environment.subprocess.run", side_effect=FileNotFoundError("git")):
            assert self.detector._git("rev-parse", "HEAD") is None

    def test_as_config_keys_match_scan_section(self):
        config = CIMetadata(branch_name="main", commit_hash="abc").as_config()

        assert config["branch_name"] == "main"
        assert config["commit_hash"] == "abc"
        assert "platform" not in config
