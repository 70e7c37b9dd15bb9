"""Client for the repository analysis endpoints."""

from __future__ import annotations

import httpx

from ..config import DEFAULT_ANALYSIS_TIMEOUT, EndpointConfig
from ..errors import UnknownError, ValidationError
from ..logging import get_logger
from ..models import AnalysisRequest, AnalysisResult, SourceKind
from .base import BackendClient, FailureMessages

logger = get_logger("clients.analyzer")

ANALYSIS_MESSAGES = FailureMessages(
    timeout=(
        "Repository analysis timed out. The repository might be too large or the server "
        "is experiencing high load. Please try again later or try with a smaller repository."
    ),
    not_found="Repository not found. Please check the owner and repository name.",
    access_denied=(
        "Access denied. You might not have permission to access this repository "
        "or API rate limit exceeded."
    ),
    unknown="Failed to analyze repository. Please check your credentials and try again.",
)


class RepositoryAnalyzerClient:
    """Validates analysis requests and dispatches them to the right backend path."""

    def __init__(
        self,
        endpoints: EndpointConfig | None = None,
        *,
        timeout: float = DEFAULT_ANALYSIS_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoints = endpoints or EndpointConfig()
        self._backend = BackendClient(
            self.endpoints.base_url,
            timeout=timeout,
            messages=ANALYSIS_MESSAGES,
            transport=transport,
        )

    @property
    def timeout(self) -> float:
        return self._backend.timeout

    def endpoint_for(self, source: SourceKind) -> str:
        if source is SourceKind.GITLAB:
            return self.endpoints.gitlab_analyze_path
        return self.endpoints.github_analyze_path

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        if not request.is_complete():
            raise ValidationError()

        path = self.endpoint_for(request.source)
        params = {"owner": request.owner.strip(), "repo": request.repo.strip()}
        logger.debug("Requesting analysis of %s/%s via %s", params["owner"], params["repo"], path)
        payload = await self._backend.request_json("GET", path, params=params)
        try:
            return AnalysisResult.from_payload(payload)
        except ValueError as exc:
            logger.warning("Analysis response could not be interpreted: %s", exc)
            raise UnknownError(ANALYSIS_MESSAGES.unknown) from exc


__all__ = ["ANALYSIS_MESSAGES", "RepositoryAnalyzerClient"]
