"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the cardinal directions used for module adjacency and grid traversal.

    The value of each member is the index of the matching fingerprint in a module's adjacency tuple.
    """

    UP = 0
    """Upward direction (towards row 0)."""
    DOWN = 1
    """Downward direction."""
    LEFT = 2
    """Left direction (towards column 0)."""
    RIGHT = 3
    """Right direction."""

    def reverse(self) -> Direction:
        """Returns the opposite direction of the current direction."""
        match self:
            case Direction.UP:
                return Direction.DOWN
            case Direction.DOWN:
                return Direction.UP
            case Direction.LEFT:
                return Direction.RIGHT
            case Direction.RIGHT:
                return Direction.LEFT

    def to_vector(self) -> tuple[int, int]:
        """Returns the (dx, dy) vector representation for the direction."""
        match self:
            case Direction.UP:
                return (0, -1)
            case Direction.DOWN:
                return (0, 1)
            case Direction.LEFT:
                return (-1, 0)
            case Direction.RIGHT:
                return (1, 0)

    @classmethod
    def from_name(cls, name: str) -> Direction:
        """Looks up a direction by its case-insensitive name (e.g. 'up')."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown direction: {name!r}") from None


class SolveState(Enum):
    """Defines the states of the collapse driver."""

    IDLE = "Idle"
    """The wave has been created or initialized but not collapsed yet."""
    RUNNING = "Running"
    """An attempt is in progress."""
    CONTRADICTION = "Contradiction"
    """The current attempt left a cell without any possible module."""
    SOLVED = "Solved"
    """Every cell holds exactly one module."""
    EXHAUSTED = "Exhausted"
    """Every allowed attempt ended in a contradiction."""
