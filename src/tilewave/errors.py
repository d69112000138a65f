"""Contains the exception types raised by the solver."""

from __future__ import annotations


class TilewaveError(Exception):
    """Base class of all errors raised by tilewave."""


class InvalidConfigurationError(TilewaveError, ValueError):
    """Raised immediately for caller errors that no retry can fix.

    Examples are an empty module catalog, a non-positive grid size, a non-positive attempt count or boundary
    constraints that leave a cell without any possible module before the first collapse.
    """


class ExhaustedError(TilewaveError):
    """Raised on request when every allowed attempt ended in a contradiction.

    Attributes:
        attempts: The number of attempts that were made.
        contradiction: The (x, y) coords of the cell that ran empty in the last attempt.
    """

    attempts: int
    contradiction: tuple[int, int] | None

    def __init__(self, attempts: int, contradiction: tuple[int, int] | None) -> None:
        self.attempts = attempts
        self.contradiction = contradiction
        super().__init__(
            f"unable to collapse the wave after {attempts} attempt(s), last contradiction at {contradiction}"
        )
