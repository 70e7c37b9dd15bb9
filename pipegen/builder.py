"""Composition root wiring clients, graph, orchestrators and persistence."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx

from .clients import ConfigGeneratorClient, RepositoryAnalyzerClient
from .config import PipegenConfig, load_config
from .graph import WorkflowGraph
from .models import CIProvider, GeneratedConfig, SourceKind
from .orchestrator import AnalysisOrchestrator, AnalysisState, GenerationOrchestrator
from .provider import ProviderSelection
from .stores import ArtifactStore


class WorkflowBuilder:
    """One user session: a graph, a provider selection, and both orchestrators."""

    def __init__(
        self,
        config: PipegenConfig | None = None,
        *,
        graph: WorkflowGraph | None = None,
        analyzer: RepositoryAnalyzerClient | None = None,
        generator: ConfigGeneratorClient | None = None,
        store: ArtifactStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_config(Path.cwd())
        self.graph = graph or WorkflowGraph()
        self.provider = ProviderSelection(self.config.default_provider)
        analyzer = analyzer or RepositoryAnalyzerClient(
            self.config.endpoints,
            timeout=self.config.timeouts.analysis,
            transport=transport,
        )
        generator = generator or ConfigGeneratorClient(
            self.config.endpoints,
            timeout=self.config.timeouts.generation,
            transport=transport,
        )
        self.analysis = AnalysisOrchestrator(analyzer, self.graph)
        self.generation = GenerationOrchestrator(
            generator,
            self.graph,
            self.analysis,
            store or ArtifactStore(self.config.artifact_path),
        )

    def can_generate_config(self) -> bool:
        return self.analysis.has_usable_analysis()

    async def analyze_repository(
        self, owner: str, repo: str, source: SourceKind | str = SourceKind.GITHUB
    ) -> AnalysisState:
        return await self.analysis.start_analysis(owner, repo, source)

    async def generate_config(self, provider: CIProvider | str | None = None) -> GeneratedConfig:
        """Generate for ``provider`` (or the current selection) and return the outcome."""
        if provider is not None:
            self.provider.select(provider)
        await self.generation.generate(self.provider.value)
        return self.generation.config

    @property
    def generated_config(self) -> GeneratedConfig:
        return self.generation.config

    @property
    def analysis_error(self) -> Optional[str]:
        return self.analysis.error


__all__ = ["WorkflowBuilder"]
