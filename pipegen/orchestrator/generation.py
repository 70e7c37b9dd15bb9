"""Configuration generation: serialize the graph, enrich it, submit, persist."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable, Optional, Protocol

from ..clients.generator import GENERATION_MESSAGES, GenerationResponse
from ..errors import EmptyWorkflowError, MissingAnalysisError, PipegenError
from ..graph.base import GraphModel
from ..logging import get_logger
from ..models import (
    AnalysisResult,
    CIProvider,
    GeneratedConfig,
    PersistedArtifact,
    WorkflowRepresentation,
)
from ..stores import ArtifactStore
from .analysis import AnalysisOrchestrator


class GeneratorClient(Protocol):
    async def generate(
        self,
        workflow: WorkflowRepresentation,
        *,
        repo_info: str,
        provider: CIProvider,
    ) -> GenerationResponse:  # pragma: no cover - protocol
        ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class GenerationOrchestrator:
    """Owns ``GeneratedConfig`` and the persisted artifact."""

    def __init__(
        self,
        client: GeneratorClient,
        graph: GraphModel,
        analysis: AnalysisOrchestrator,
        store: ArtifactStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.graph = graph
        self.analysis = analysis
        self.store = store
        self.logger = get_logger("orchestrator.generation")
        self._clock = clock
        self._config = GeneratedConfig.idle()
        self._config_visible = False
        self._last_artifact: Optional[PersistedArtifact] = None
        self._attempt = 0

    @property
    def config(self) -> GeneratedConfig:
        return self._config

    @property
    def config_visible(self) -> bool:
        return self._config_visible

    @property
    def last_artifact(self) -> Optional[PersistedArtifact]:
        return self._last_artifact

    def close_config(self) -> None:
        self._config_visible = False

    async def generate(self, provider: CIProvider) -> None:
        """Generate a configuration for ``provider``; observe the outcome via :attr:`config`."""
        self._attempt += 1
        token = self._attempt

        analysis = self.analysis.result
        if not self.analysis.has_usable_analysis() or analysis is None:
            self._settle(token, GeneratedConfig.failed(MissingAnalysisError().message))
            return

        workflow = self.graph.serialize_to_workflow()
        if workflow is None:
            self._settle(token, GeneratedConfig.failed(EmptyWorkflowError().message))
            return

        repo_info = analysis.summary()
        self._config = GeneratedConfig.pending()
        self._config_visible = True
        self.logger.info("Generating %s configuration for %s", provider.value, analysis.repository)

        try:
            response = await self.client.generate(workflow, repo_info=repo_info, provider=provider)
        except PipegenError as exc:
            self._settle(token, GeneratedConfig.failed(exc.message))
            return
        except Exception as exc:
            self.logger.exception("CI/CD configuration generation crashed: %s", exc)
            self._settle(token, GeneratedConfig.failed(GENERATION_MESSAGES.unknown))
            return

        if not self._settle(token, GeneratedConfig.succeeded(response.yaml)):
            return
        self._persist(response, provider, analysis)

    def _settle(self, token: int, outcome: GeneratedConfig) -> bool:
        if token != self._attempt:
            self.logger.debug("Discarding outcome of superseded generation attempt %d", token)
            return False
        self._config = outcome
        if outcome.error:
            self.logger.warning("CI/CD configuration generation failed: %s", outcome.error)
        return True

    def _persist(
        self, response: GenerationResponse, provider: CIProvider, analysis: AnalysisResult
    ) -> None:
        artifact = PersistedArtifact(
            yaml=response.yaml,
            provider=provider,
            project_name=response.project_name or analysis.project_name,
            saved_at=self._clock().isoformat().replace("+00:00", "Z"),
        )
        try:
            self.store.save(artifact)
        except OSError as exc:
            self.logger.error("Could not persist generated configuration to %s: %s", self.store.path, exc)
            return
        self._last_artifact = artifact
        self.logger.debug("Saved %s configuration for %s", provider.value, artifact.project_name)


__all__ = ["GenerationOrchestrator", "GeneratorClient"]
