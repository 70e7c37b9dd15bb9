"""Assemble CI/CD pipelines from repository analysis and generate provider configs."""

__version__ = "0.1.0"
