# vierwandt/errors.py
from __future__ import annotations

from dataclasses import dataclass


class PuzzleError(Exception):
    """Base class for every failure the API turns into an error response."""


class NotAvailable(PuzzleError):
    """No puzzle can be selected (empty corpus, bad epoch, epoch in the future)."""


class IncompleteGrid(PuzzleError):
    """The grid has empty slots left after the remaining words ran out."""


class InvalidInput(PuzzleError):
    """Malformed client request."""


class RelayError(PuzzleError):
    pass


class MissingField(RelayError):
    pass


class MailNotConfigured(RelayError):
    pass


class DeliveryFailed(RelayError):
    pass


@dataclass(frozen=True)
class ValidationWarning:
    """Non-fatal data irregularity. Collected, logged, never raised."""
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
