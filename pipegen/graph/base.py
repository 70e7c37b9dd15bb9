"""Contract for the editable pipeline graph consumed by the orchestrators."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import AnalysisResult, WorkflowRepresentation
from .nodes import NodeSpec


class GraphModel(ABC):
    """Directed graph of pipeline stages mutated only through these operations."""

    @abstractmethod
    def add_node(self, spec: NodeSpec) -> str:
        """Insert a stage and return its key."""

    @abstractmethod
    def delete_selection(self) -> int:
        """Remove the selected stages and their links; return how many stages went."""

    @abstractmethod
    def clear_diagram(self) -> None:
        """Drop every stage and link."""

    @abstractmethod
    def populate_from_analysis(self, analysis: AnalysisResult) -> None:
        """Replace the graph with stages suggested by a repository analysis."""

    @abstractmethod
    def serialize_to_workflow(self) -> Optional[WorkflowRepresentation]:
        """Return the workflow form of the graph, or None when it cannot be produced."""
