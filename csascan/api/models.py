"""
Data Models for the CSA Scan Workflow

Dataclass-based models for the values exchanged with the scanning service
throughout the scan lifecycle.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


SCAN_TYPE = "csa"


class ScanStatus(str, Enum):
    """Analysis status reported by the scanning service"""
    UNKNOWN = "Unknown"
    QUEUED = "Queued"
    MANIFEST = "Manifest"
    LOCATING_DEPENDENCIES = "LocatingDependencies"
    LOADING_PACKAGE_DETAILS = "LoadingPackageDetails"
    LOCATING_VULNERABILITIES = "LocatingVulnerabilities"
    RUNNING_GOVERNANCE_POLICIES = "RunningGovernancePolicies"
    FINISHED = "Finished"
    FAILED_WITH_ISSUES = "FailedWithIssues"
    INCOMPLETE = "Incomplete"
    ERROR = "Error"
    NO_FILES = "NoFiles"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ScanStatus":
        """Parse a wire value, falling back to UNKNOWN"""
        for status in cls:
            if value is not None and status.value.lower() == str(value).lower():
                return status
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def has_analysis(self) -> bool:
        """True when the service produced analysis results for this status"""
        return self in ANALYZED_STATUSES


TERMINAL_STATUSES = frozenset({
    ScanStatus.FINISHED,
    ScanStatus.FAILED_WITH_ISSUES,
    ScanStatus.INCOMPLETE,
    ScanStatus.ERROR,
    ScanStatus.NO_FILES,
})

ANALYZED_STATUSES = frozenset({
    ScanStatus.FINISHED,
    ScanStatus.FAILED_WITH_ISSUES,
    ScanStatus.INCOMPLETE,
})


class OnFailure(str, Enum):
    """What to do with the build when the scan is not clean"""
    CONTINUE = "continue_on_failure"
    FAIL = "fail_the_build"

    @classmethod
    def parse(cls, value: str) -> "OnFailure":
        for option in cls:
            if option.value.lower() == str(value).lower():
                return option
        valid = ", ".join(option.value for option in cls)
        raise ValueError(f"Invalid on-failure value '{value}'. Valid options are: {valid}.")


class OutputFormat(str, Enum):
    """Formatted report types the service can render"""
    SARIF = "SARIF"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        for option in cls:
            if option.value.lower() == str(value).lower():
                return option
        valid = ", ".join(option.value for option in cls)
        raise ValueError(f"Invalid output format '{value}'. Valid options are: {valid}.")

    @property
    def file_type(self) -> str:
        return "sarif.json"


class PackageManagerType(str, Enum):
    """Package manager detected by the service for an uploaded file"""
    UNKNOWN = "Unknown"
    CFAMILY = "CFamily"
    DART = "Dart"
    ERLANG = "Erlang"
    GO = "Go"
    HOMEBREW = "Homebrew"
    JAVA = "Java"
    NPM = "NPM"
    NUGET = "NuGet"
    PHP = "Php"
    PYTHON = "Python"
    RUBY = "Ruby"
    RUST = "Rust"
    SWIFT = "Swift"


class ManifestStatus(str, Enum):
    """Validity of an uploaded manifest"""
    UNKNOWN = "Unknown"
    VALID = "Valid"
    ONLY_DEV_DEPENDENCIES = "OnlyDevDependencies"
    ONLY_LOCK_FILES = "OnlyLockFiles"
    ONLY_NON_LOCK_FILES = "OnlyNonLockFiles"
    NO_PACKAGES = "NoPackages"
    UNKNOWN_MANIFEST_TYPE = "UnknownManifestType"
    UNSUPPORTED_MANIFEST_VERSION = "UnsupportedManifestVersion"
    PARSING_ERROR = "ParsingError"
    EMPTY = "Empty"


def _parse_enum(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return enum_cls("Unknown")


class LifecycleStage(Enum):
    """Stages of a single scan run"""
    CREATED = "created"
    GENERATING = "generating"
    UPLOADING = "uploading"
    STARTING = "starting"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ContributingDeveloperAudit:
    """Who triggered the scan, as reported by the CI environment"""
    source: str
    source_name: str
    contributing_developer_id: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "source": self.source,
            "sourceName": self.source_name,
            "contributingDeveloperId": self.contributing_developer_id,
        }


@dataclass(frozen=True)
class ScanRequest:
    """Everything the service needs to create one scan"""
    project_name: str
    client_id: str
    commit_hash: Optional[str] = None
    branch_name: Optional[str] = None
    branch_uri: Optional[str] = None
    build_version: Optional[str] = None
    build_uri: Optional[str] = None
    integration_name: str = "None"
    integration_type: str = "Script"
    operating_environment: Optional[str] = None
    app_version: Optional[str] = None
    script_version: Optional[str] = None
    tool_name: str = "syft"
    tool_version: Optional[str] = None
    contributing_developer_audit: Tuple[ContributingDeveloperAudit, ...] = ()
    command_line: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Render the create-scan request body"""
        payload = {
            "projectName": self.project_name,
            "commitHash": self.commit_hash,
            "branch": self.branch_name,
            "branchUri": self.branch_uri,
            "buildVersion": self.build_version,
            "buildUri": self.build_uri,
            "integrationName": self.integration_name,
            "integrationType": self.integration_type,
            "operatingEnvironment": self.operating_environment,
            "appVersion": self.app_version,
            "scriptVersion": self.script_version,
            "toolName": self.tool_name,
            "toolVersion": self.tool_version,
            "commandLine": self.command_line,
        }
        if self.contributing_developer_audit:
            payload["contributingDeveloperAudit"] = [
                audit.to_payload() for audit in self.contributing_developer_audit
            ]
        return payload


@dataclass(frozen=True)
class ScanHandle:
    """Identifiers of a scan created on the service"""
    project_hash: str
    branch_hash: str
    analysis_id: str
    scan_url: str
    scan_status_url: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ScanHandle":
        return cls(
            project_hash=data["projectHash"],
            branch_hash=data["branchHash"],
            analysis_id=data.get("scanId") or data["analysisId"],
            scan_url=data.get("scanUrl", ""),
            scan_status_url=data["scanStatusUrl"],
        )


@dataclass
class CodedMessage:
    """Coded error model returned by the service"""
    code: Optional[str] = None
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    status_code: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CodedMessage":
        data = data or {}
        return cls(
            code=data.get("code"),
            message=data.get("message"),
            data=data.get("data") or {},
            status_code=data.get("statusCode"),
        )


@dataclass
class AnalysisScanStatus:
    """One status poll"""
    status: ScanStatus
    is_complete: bool
    violation_count: int = 0
    vulnerability_count: int = 0
    errors: List[CodedMessage] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status == ScanStatus.FINISHED

    @property
    def has_issues(self) -> bool:
        return self.violation_count > 0 or self.vulnerability_count > 0

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AnalysisScanStatus":
        status = ScanStatus.parse(data.get("status"))
        violations = data.get("violations") or {}
        vulnerabilities = data.get("vulnerabilities") or {}
        return cls(
            status=status,
            is_complete=status.is_terminal,
            violation_count=violations.get("count") or 0,
            vulnerability_count=vulnerabilities.get("count") or 0,
            errors=[CodedMessage.from_dict(e) for e in (data.get("errors") or [])],
        )


@dataclass
class ManifestRecord:
    """Per-file outcome of a manifest upload"""
    name: str
    filename: str
    package_manager: PackageManagerType = PackageManagerType.UNKNOWN
    status: ManifestStatus = ManifestStatus.UNKNOWN
    status_message: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManifestRecord":
        return cls(
            name=data.get("name", ""),
            filename=data.get("filename", ""),
            package_manager=_parse_enum(PackageManagerType, data.get("packageManager")),
            status=_parse_enum(ManifestStatus, data.get("status")),
            status_message=data.get("statusMessage") or "",
        )

    @property
    def is_valid(self) -> bool:
        return self.status == ManifestStatus.VALID


@dataclass
class UploadResult:
    """Manifest upload response"""
    message: str
    manifests: List[ManifestRecord] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "UploadResult":
        return cls(
            message=data.get("message") or "",
            manifests=[ManifestRecord.from_dict(m) for m in (data.get("manifests") or [])],
        )


@dataclass
class ScanOutcome:
    """Final result of a lifecycle run"""
    stage: LifecycleStage
    exit_code: int
    status: Optional[ScanStatus] = None
    handle: Optional[ScanHandle] = None
    error: Optional[str] = None


@dataclass
class APIConfig:
    """Connection settings for the scanning service"""
    api_url: str
    api_key: str
    client_id: str
    request_timeout: int = 60

    def __post_init__(self):
        if not self.api_url.endswith("/"):
            self.api_url = f"{self.api_url}/"

    def get_headers(self) -> Dict[str, str]:
        """Get authentication headers for API requests"""
        return {
            "x-soos-apikey": self.api_key,
            "Accept": "application/json",
        }
