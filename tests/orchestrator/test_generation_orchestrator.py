"""Tests for the configuration generation orchestrator."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pytest

from pipegen.clients import ConfigGeneratorClient, GenerationResponse, RepositoryAnalyzerClient
from pipegen.clients.generator import GENERATION_MESSAGES
from pipegen.config import EndpointConfig
from pipegen.models import CIProvider, GeneratedConfig, PersistedArtifact
from pipegen.orchestrator import AnalysisOrchestrator, GenerationOrchestrator
from tests._fixtures.backend import WIDGETS_ANALYSIS, FakeBackend
from tests._fixtures.doubles import GatedGenerator, RecordingGraph, RecordingStore

ANALYZE_PATH = "/api/github/analyze"
GENERATE_PATH = "/api/cicdgen"
FIXED_NOW = datetime(2026, 10, 17, 12, 30, tzinfo=UTC)


@dataclass
class Session:
    backend: FakeBackend
    graph: RecordingGraph
    store: RecordingStore
    analysis: AnalysisOrchestrator
    generation: GenerationOrchestrator

    def analyze(self, owner: str = "acme", repo: str = "widgets") -> None:
        asyncio.run(self.analysis.start_analysis(owner, repo))

    def generate(self, provider: CIProvider = CIProvider.GITHUB_ACTIONS) -> GeneratedConfig:
        asyncio.run(self.generation.generate(provider))
        return self.generation.config


@pytest.fixture
def session(backend: FakeBackend, tmp_path: Path) -> Session:
    endpoints = EndpointConfig(base_url="http://backend.test")
    graph = RecordingGraph()
    store = RecordingStore(tmp_path / ".pipegen" / "artifact.json")
    analysis = AnalysisOrchestrator(
        RepositoryAnalyzerClient(endpoints, transport=backend.transport()), graph
    )
    generation = GenerationOrchestrator(
        ConfigGeneratorClient(endpoints, transport=backend.transport()),
        graph,
        analysis,
        store,
        clock=lambda: FIXED_NOW,
    )
    backend.reply("GET", ANALYZE_PATH, body=WIDGETS_ANALYSIS)
    return Session(backend, graph, store, analysis, generation)


def test_generate_without_analysis_fails_locally(session: Session) -> None:
    config = session.generate()

    assert config == GeneratedConfig.failed("Please analyze a repository first")
    assert session.backend.calls() == []
    assert session.store.saved == []
    assert session.analysis.error is None


def test_generate_after_failed_analysis_is_blocked(session: Session) -> None:
    session.backend.reply("GET", ANALYZE_PATH, status=404)
    session.analyze()

    config = session.generate()

    assert config.error == "Please analyze a repository first"
    assert session.backend.calls(GENERATE_PATH) == []
    assert session.analysis.error is not None and "not found" in session.analysis.error


def test_generate_with_empty_graph_fails_locally(session: Session) -> None:
    session.analyze()
    session.graph.clear_diagram()

    config = session.generate()

    assert config == GeneratedConfig.failed("Failed to generate workflow JSON")
    assert session.backend.calls(GENERATE_PATH) == []
    assert session.generation.config_visible is False


def test_successful_generation_sets_config_and_persists(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "name: CI\n", "projectName": "widgets"})
    session.analyze()

    config = session.generate(CIProvider.GITHUB_ACTIONS)

    assert config == GeneratedConfig(yaml="name: CI\n", loading=False, error=None)
    assert session.generation.config_visible is True
    assert session.store.saved == [
        PersistedArtifact(
            yaml="name: CI\n",
            provider=CIProvider.GITHUB_ACTIONS,
            project_name="widgets",
            saved_at="2026-10-17T12:30:00Z",
        )
    ]
    assert session.store.load() == session.store.saved[0]
    assert session.generation.last_artifact == session.store.saved[0]


def test_request_carries_workflow_summary_and_provider(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "stages: []\n"})
    session.analyze()

    session.generate(CIProvider.GITLAB_CI)

    body = session.backend.json_body()
    assert body["ciProvider"] == "gitlab-ci"
    assert [node["category"] for node in body["workflow"]["nodes"]] == [
        "source",
        "install",
        "build",
        "test",
        "deploy",
    ]
    assert body["repoInfo"] == (
        "Repository: acme/widgets\n"
        "Language: Node.js\n"
        "Framework: Node.js\n"
        "Has Dockerfile: No\n"
        "Has CI/CD Config: No"
    )


def test_project_name_falls_back_to_repository_segment(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "pipeline {}\n"})
    session.analyze()

    session.generate(CIProvider.JENKINS)

    (artifact,) = session.store.saved
    assert artifact.project_name == "widgets"
    assert artifact.provider is CIProvider.JENKINS


def test_access_denied_sets_error_without_persisting(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, status=403)
    session.analyze()

    config = session.generate()

    assert config.yaml == ""
    assert config.loading is False
    assert config.error == GENERATION_MESSAGES.access_denied
    assert session.store.saved == []
    assert not session.store.path.exists()


def test_generation_failure_leaves_analysis_untouched(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, status=500, body={"error": "generator down"})
    session.analyze()
    result = session.analysis.result

    config = session.generate()

    assert config.error == "generator down"
    assert session.analysis.result is result
    assert session.analysis.error is None
    assert session.analysis.has_usable_analysis() is True


def test_repeated_generation_fully_replaces_config(session: Session) -> None:
    session.analyze()

    session.backend.reply("POST", GENERATE_PATH, status=500, body={"error": "first try failed"})
    assert session.generate().error == "first try failed"

    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "name: CI\n"})
    assert session.generate() == GeneratedConfig.succeeded("name: CI\n")

    session.backend.reply("POST", GENERATE_PATH, status=504)
    assert session.generate() == GeneratedConfig.failed(GENERATION_MESSAGES.timeout)
    assert len(session.store.saved) == 1


def test_config_is_pending_while_request_is_in_flight(session: Session) -> None:
    session.analyze()
    generator = GatedGenerator()
    session.generation.client = generator

    async def scenario() -> None:
        task = asyncio.create_task(session.generation.generate(CIProvider.GITHUB_ACTIONS))
        await asyncio.sleep(0)
        assert session.generation.config == GeneratedConfig.pending()
        assert session.generation.config_visible is True
        generator.pending[0][1].set_result(GenerationResponse(yaml="name: CI\n"))
        await task

    asyncio.run(scenario())
    assert session.generation.config == GeneratedConfig.succeeded("name: CI\n")


def test_latest_generation_attempt_wins(session: Session) -> None:
    session.analyze()
    generator = GatedGenerator()
    session.generation.client = generator

    async def scenario() -> None:
        first = asyncio.create_task(session.generation.generate(CIProvider.GITHUB_ACTIONS))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.generation.generate(CIProvider.JENKINS))
        await asyncio.sleep(0)
        generator.pending[1][1].set_result(GenerationResponse(yaml="pipeline {}\n"))
        await second
        generator.pending[0][1].set_result(GenerationResponse(yaml="name: CI\n"))
        await first

    asyncio.run(scenario())

    assert session.generation.config == GeneratedConfig.succeeded("pipeline {}\n")
    assert [artifact.provider for artifact in session.store.saved] == [CIProvider.JENKINS]


def test_close_config_hides_without_touching_outcome(session: Session) -> None:
    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "name: CI\n"})
    session.analyze()
    session.generate()

    session.generation.close_config()

    assert session.generation.config_visible is False
    assert session.generation.config.yaml == "name: CI\n"


def test_persistence_failure_keeps_generated_config(session: Session) -> None:
    class FailingStore(RecordingStore):
        def save(self, artifact: PersistedArtifact) -> None:
            raise PermissionError("read-only filesystem")

    session.generation.store = FailingStore(session.store.path)
    session.backend.reply("POST", GENERATE_PATH, body={"yaml": "name: CI\n"})
    session.analyze()

    config = session.generate()

    assert config == GeneratedConfig.succeeded("name: CI\n")
    assert session.generation.last_artifact is None
