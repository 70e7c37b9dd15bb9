"""In-memory pipeline graph with analysis-driven synthesis."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from ..logging import get_logger
from ..models import AnalysisResult, WorkflowRepresentation
from .base import GraphModel
from .nodes import Link, NodeSpec, STAGE_CATEGORIES

logger = get_logger("graph")


class WorkflowGraph(GraphModel):
    """Keeps stages in insertion order and links as an ordered edge list."""

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeSpec] = {}
        self._links: List[Link] = []
        self._selection: Set[str] = set()
        self._counter = 0

    # ------------------------------------------------------------------
    # Mutation

    def add_node(self, spec: NodeSpec) -> str:
        if spec.category not in STAGE_CATEGORIES:
            raise ValueError(f"Unknown stage category '{spec.category}'")
        key = spec.key or self._next_key(spec.category)
        if key in self._nodes:
            raise ValueError(f"Stage '{key}' already exists")
        self._nodes[key] = NodeSpec(
            category=spec.category,
            label=spec.label,
            key=key,
            properties=dict(spec.properties),
        )
        return key

    def link(self, source: str, target: str) -> Link:
        for key in (source, target):
            if key not in self._nodes:
                raise KeyError(f"Unknown stage '{key}'")
        if source == target:
            raise ValueError("A stage cannot be linked to itself")
        link = Link(source=source, target=target)
        if link not in self._links:
            self._links.append(link)
        return link

    def select(self, keys: Iterable[str]) -> Set[str]:
        """Replace the selection with the known keys among ``keys``."""
        self._selection = {key for key in keys if key in self._nodes}
        return set(self._selection)

    def delete_selection(self) -> int:
        doomed = self._selection
        if not doomed:
            return 0
        for key in doomed:
            self._nodes.pop(key, None)
        self._links = [
            link
            for link in self._links
            if link.source not in doomed and link.target not in doomed
        ]
        removed = len(doomed)
        self._selection = set()
        return removed

    def clear_diagram(self) -> None:
        self._nodes.clear()
        self._links.clear()
        self._selection = set()
        self._counter = 0

    # ------------------------------------------------------------------
    # Orchestrator operations

    def populate_from_analysis(self, analysis: AnalysisResult) -> None:
        self.clear_diagram()
        previous: Optional[str] = None
        for spec in suggest_stages(analysis):
            key = self.add_node(spec)
            if previous is not None:
                self.link(previous, key)
            previous = key
        logger.debug(
            "Synthesised %d stages for %s", len(self._nodes), analysis.repository
        )

    def serialize_to_workflow(self) -> Optional[WorkflowRepresentation]:
        if not self._nodes:
            return None
        nodes = [
            {
                "key": key,
                "category": spec.category,
                "label": spec.label,
                "properties": dict(spec.properties),
            }
            for key, spec in self._nodes.items()
        ]
        links = [{"from": link.source, "to": link.target} for link in self._links]
        return WorkflowRepresentation(workflow={"nodes": nodes, "links": links})

    # ------------------------------------------------------------------
    # Read helpers

    @property
    def nodes(self) -> List[NodeSpec]:
        return list(self._nodes.values())

    @property
    def links(self) -> List[Link]:
        return list(self._links)

    @property
    def selection(self) -> Set[str]:
        return set(self._selection)

    def _next_key(self, category: str) -> str:
        while True:
            self._counter += 1
            key = f"{category}-{self._counter}"
            if key not in self._nodes:
                return key


def suggest_stages(analysis: AnalysisResult) -> List[NodeSpec]:
    """Return a linear stage plan for the analysed repository."""
    package_manager = analysis.package_manager or "generic"
    stages = [
        NodeSpec(category="source", label="Checkout"),
        NodeSpec(
            category="install",
            label="Install dependencies",
            properties={"packageManager": package_manager},
        ),
        NodeSpec(category="build", label="Build", properties={"framework": analysis.framework}),
        NodeSpec(category="test", label="Run tests"),
    ]
    if analysis.has_dockerfile:
        stages.append(NodeSpec(category="docker", label="Build Docker image"))
    stages.append(NodeSpec(category="deploy", label="Deploy"))
    return stages


__all__ = ["WorkflowGraph", "suggest_stages"]
