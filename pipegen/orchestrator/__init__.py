"""Orchestrators binding analysis, graph synthesis and configuration generation."""

from .analysis import AnalysisOrchestrator, AnalysisState
from .generation import GenerationOrchestrator

__all__ = ["AnalysisOrchestrator", "AnalysisState", "GenerationOrchestrator"]
