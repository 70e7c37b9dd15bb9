"""Client for the remote CI/CD configuration generator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config import DEFAULT_GENERATION_TIMEOUT, EndpointConfig
from ..errors import RemoteError, UnknownError
from ..logging import get_logger
from ..models import CIProvider, WorkflowRepresentation
from .base import BackendClient, FailureMessages

logger = get_logger("clients.generator")

GENERATION_MESSAGES = FailureMessages(
    timeout="CI/CD configuration generation timed out. Please try again later.",
    not_found="CI/CD configuration generator not found. Please check the service configuration.",
    access_denied="Access denied. You might not have permission to generate CI/CD configurations.",
    unknown="Failed to generate CI/CD configuration",
)


@dataclass(frozen=True)
class GenerationResponse:
    """Successful generator reply."""

    yaml: str
    project_name: Optional[str] = None


class ConfigGeneratorClient:
    """Submits an enriched workflow to the generator for one provider."""

    def __init__(
        self,
        endpoints: EndpointConfig | None = None,
        *,
        timeout: float = DEFAULT_GENERATION_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoints = endpoints or EndpointConfig()
        self._backend = BackendClient(
            self.endpoints.base_url,
            timeout=timeout,
            messages=GENERATION_MESSAGES,
            transport=transport,
        )

    @staticmethod
    def build_payload(
        workflow: WorkflowRepresentation, *, repo_info: str, provider: CIProvider
    ) -> Dict[str, Any]:
        payload = workflow.to_payload()
        payload["repoInfo"] = repo_info
        payload["ciProvider"] = provider.value
        return payload

    async def generate(
        self,
        workflow: WorkflowRepresentation,
        *,
        repo_info: str,
        provider: CIProvider,
    ) -> GenerationResponse:
        payload = self.build_payload(workflow, repo_info=repo_info, provider=provider)
        logger.debug("Submitting workflow for %s generation", provider.value)
        body = await self._backend.request_json("POST", self.endpoints.generate_path, json=payload)
        return _parse_response(body)


def _parse_response(body: object) -> GenerationResponse:
    if not isinstance(body, dict):
        raise UnknownError(GENERATION_MESSAGES.unknown)
    yaml_text = body.get("yaml")
    if not isinstance(yaml_text, str):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            raise RemoteError(error.strip())
        raise UnknownError(GENERATION_MESSAGES.unknown)
    project_name = body.get("projectName")
    if not isinstance(project_name, str) or not project_name.strip():
        project_name = None
    return GenerationResponse(yaml=yaml_text, project_name=project_name)


__all__ = ["ConfigGeneratorClient", "GENERATION_MESSAGES", "GenerationResponse"]
