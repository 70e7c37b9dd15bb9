"""Analysis-driven orchestration: analyze a repository, then seed the graph."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

from ..clients.analyzer import ANALYSIS_MESSAGES
from ..errors import PipegenError, ValidationError
from ..graph.base import GraphModel
from ..logging import get_logger
from ..models import AnalysisRequest, AnalysisResult, SourceKind


class AnalyzerClient(Protocol):
    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:  # pragma: no cover - protocol
        ...


class AnalysisState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"


class AnalysisOrchestrator:
    """Owns the analysis result and its loading/error flags.

    Every call to :meth:`start_analysis` issues a new attempt token. Attempts
    are never cancelled, but only the most recently issued one may commit its
    outcome; earlier settlements are dropped.
    """

    def __init__(self, client: AnalyzerClient, graph: GraphModel) -> None:
        self.client = client
        self.graph = graph
        self.logger = get_logger("orchestrator.analysis")
        self._state = AnalysisState.IDLE
        self._result: Optional[AnalysisResult] = None
        self._error: Optional[str] = None
        self._is_loading = False
        self._attempt = 0

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def has_usable_analysis(self) -> bool:
        return self._state is AnalysisState.ANALYZED

    async def start_analysis(
        self,
        owner: str,
        repo: str,
        source: SourceKind | str = SourceKind.GITHUB,
    ) -> AnalysisState:
        """Run one analysis attempt and return the state it leaves behind.

        Graph synthesis runs only after the successful result is committed;
        exceptions raised by the graph propagate to the caller.
        """
        token = self._begin()
        try:
            request = AnalysisRequest(owner=owner, repo=repo, source=_coerce_source(source))
            result = await self.client.analyze(request)
        except PipegenError as exc:
            self._fail(token, exc.message)
            return self._state
        except Exception as exc:
            self.logger.exception("Repository analysis crashed: %s", exc)
            self._fail(token, ANALYSIS_MESSAGES.unknown)
            return self._state

        if token != self._attempt:
            self.logger.debug(
                "Discarding analysis of %s from superseded attempt %d", result.repository, token
            )
            return self._state

        self._result = result
        self._error = None
        self._is_loading = False
        self._state = AnalysisState.ANALYZED
        self.logger.info(
            "Analyzed %s (package manager: %s)", result.repository, result.package_manager or "unknown"
        )
        self.graph.populate_from_analysis(result)
        return self._state

    def _begin(self) -> int:
        self._attempt += 1
        self._result = None
        self._error = None
        self._is_loading = True
        self._state = AnalysisState.ANALYZING
        return self._attempt

    def _fail(self, token: int, message: str) -> None:
        if token != self._attempt:
            self.logger.debug("Discarding failure from superseded analysis attempt %d", token)
            return
        self._result = None
        self._error = message
        self._is_loading = False
        self._state = AnalysisState.FAILED
        self.logger.warning("Repository analysis failed: %s", message)


def _coerce_source(source: SourceKind | str) -> SourceKind:
    if isinstance(source, SourceKind):
        return source
    try:
        return SourceKind(source)
    except ValueError as exc:
        raise ValidationError(f"Unsupported repository source '{source}'") from exc


__all__ = ["AnalysisOrchestrator", "AnalysisState", "AnalyzerClient"]
