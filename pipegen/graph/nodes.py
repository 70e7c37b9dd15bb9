"""Stage and link value types for the pipeline graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

STAGE_CATEGORIES = (
    "source",
    "install",
    "lint",
    "build",
    "test",
    "docker",
    "deploy",
    "custom",
)


@dataclass(frozen=True)
class NodeSpec:
    """Description of a stage the user (or synthesis) wants to add."""

    category: str
    label: str
    key: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Link:
    """Ordering edge: ``source`` must run before ``target``."""

    source: str
    target: str


__all__ = ["Link", "NodeSpec", "STAGE_CATEGORIES"]
