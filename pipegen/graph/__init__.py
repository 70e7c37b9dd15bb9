"""Pipeline graph contract and in-memory implementation."""

from .base import GraphModel
from .nodes import Link, NodeSpec, STAGE_CATEGORIES
from .workflow import WorkflowGraph, suggest_stages

__all__ = [
    "GraphModel",
    "Link",
    "NodeSpec",
    "STAGE_CATEGORIES",
    "WorkflowGraph",
    "suggest_stages",
]
