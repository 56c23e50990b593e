"""
Exceptions raised by the case intake engine.

Degenerate answers (empty text) and empty follow-up lists are normal
outcomes and never raise. Only contract violations and failures of external
collaborators surface as exceptions.
"""


class CaseIntakeError(Exception):
    """Base class for all case intake errors."""


class InvalidPhase(CaseIntakeError, ValueError):
    """An unrecognized or out-of-sequence conversation phase was supplied."""

    def __init__(self, phase, message: str = ""):
        self.phase = phase
        super().__init__(message or f"Unrecognized conversation phase: {phase!r}")


class GenerationError(CaseIntakeError):
    """The external text-generation service failed to produce a question."""
