"""Core data models shared across pipegen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

SCHEMA_VERSION = 1


class SourceKind(str, Enum):
    """Git hosting services the analysis backend knows how to inspect."""

    GITHUB = "github"
    GITLAB = "gitlab"


class CIProvider(str, Enum):
    """Target CI systems a configuration can be generated for."""

    GITHUB_ACTIONS = "github-actions"
    GITLAB_CI = "gitlab-ci"
    JENKINS = "jenkins"


@dataclass(frozen=True)
class AnalysisRequest:
    """Parameters for a single repository analysis call."""

    owner: str
    repo: str
    source: SourceKind = SourceKind.GITHUB

    def is_complete(self) -> bool:
        return bool(self.owner and self.owner.strip() and self.repo and self.repo.strip())


@dataclass(frozen=True)
class AnalysisResult:
    """Read-only view of the analysis backend's response.

    Only the fields below are interpreted; everything else travels untouched
    in ``raw`` so graph synthesis can use it.
    """

    repository: str
    package_manager: str
    has_dockerfile: bool
    has_ci_config: bool
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def from_payload(cls, payload: object) -> "AnalysisResult":
        if not isinstance(payload, dict):
            raise ValueError("analysis response must be a JSON object")
        repository = payload.get("repo")
        if not isinstance(repository, str) or not repository:
            raise ValueError("analysis response is missing 'repo'")
        package_manager = payload.get("packageManager")
        return cls(
            repository=repository,
            package_manager=package_manager if isinstance(package_manager, str) else "",
            has_dockerfile=payload.get("hasDockerfile") is True,
            has_ci_config=payload.get("hasCiCdConfig") is True,
            raw=dict(payload),
        )

    @property
    def framework(self) -> str:
        if "Node.js" in self.package_manager:
            return "Node.js"
        return self.package_manager

    @property
    def project_name(self) -> str:
        return self.repository.rstrip("/").split("/")[-1] or self.repository

    def summary(self) -> str:
        """Human-readable block attached to generation requests."""
        return "\n".join(
            [
                f"Repository: {self.repository}",
                f"Language: {self.package_manager}",
                f"Framework: {self.framework}",
                f"Has Dockerfile: {'Yes' if self.has_dockerfile else 'No'}",
                f"Has CI/CD Config: {'Yes' if self.has_ci_config else 'No'}",
            ]
        )


@dataclass(frozen=True)
class WorkflowRepresentation:
    """Serialized, provider-agnostic form of the pipeline graph."""

    workflow: Mapping[str, Any]
    schema_version: int = SCHEMA_VERSION

    def to_payload(self) -> Dict[str, Any]:
        return {"workflow": self.workflow}


@dataclass(frozen=True)
class GeneratedConfig:
    """Observable outcome of the most recent generation attempt."""

    yaml: str = ""
    loading: bool = False
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "GeneratedConfig":
        return cls()

    @classmethod
    def pending(cls) -> "GeneratedConfig":
        return cls(yaml="", loading=True, error=None)

    @classmethod
    def succeeded(cls, yaml: str) -> "GeneratedConfig":
        return cls(yaml=yaml, loading=False, error=None)

    @classmethod
    def failed(cls, message: str) -> "GeneratedConfig":
        return cls(yaml="", loading=False, error=message)


@dataclass(frozen=True)
class PersistedArtifact:
    """Durable record of a successful generation."""

    yaml: str
    provider: CIProvider
    project_name: str
    saved_at: str


__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "CIProvider",
    "GeneratedConfig",
    "PersistedArtifact",
    "SCHEMA_VERSION",
    "SourceKind",
    "WorkflowRepresentation",
]
