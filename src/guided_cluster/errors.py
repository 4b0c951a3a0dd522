"""
Exceptions raised by the analysis pipeline.
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for analysis failures."""


class ValidationError(AnalysisError, ValueError):
    """Input rejected before any computation starts."""


class ComputationError(AnalysisError):
    """A numerical routine failed on input that passed validation."""

    def __init__(self, stage: str, message: Optional[str] = None):
        self.stage = stage
        super().__init__(f"{stage} failed: {message}" if message else f"{stage} failed")
