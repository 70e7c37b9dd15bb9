"""HTTP clients for the analysis and generation backends."""

from .analyzer import ANALYSIS_MESSAGES, RepositoryAnalyzerClient
from .base import BackendClient, FailureMessages, classify_failure
from .generator import GENERATION_MESSAGES, ConfigGeneratorClient, GenerationResponse

__all__ = [
    "ANALYSIS_MESSAGES",
    "BackendClient",
    "ConfigGeneratorClient",
    "FailureMessages",
    "GENERATION_MESSAGES",
    "GenerationResponse",
    "RepositoryAnalyzerClient",
    "classify_failure",
]
