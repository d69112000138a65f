"""Contains the grid of cells holding the modules that are still possible at each position."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from tilewave.enums import Direction
from tilewave.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from random import Random

    import numpy as np
    from numpy.typing import NDArray

    from tilewave.model.module_catalog import Module, ModuleCatalog

# Signature of a caller supplied filter deciding whether a module may stay in a cell.
ModulePredicate = Callable[["Module"], bool]

# The superpositions of all cells as tuples of module indices, in flat grid order.
SpaceSnapshot = tuple[tuple[int, ...], ...]


class Cell:
    """A single position of the grid, holding the modules still considered possible there (its superposition).

    A cell whose superposition is empty is in a contradiction state, meaning that the current attempt cannot be
    finished. A cell holding exactly one module is collapsed. The superposition only ever shrinks during an attempt.

    Attributes:
        x: The column of the cell.
        y: The row of the cell.
        superposition: The modules still possible at this position, in catalog order.
    """

    x: int
    y: int
    superposition: list[Module]

    def __init__(self, x: int, y: int, superposition: list[Module]) -> None:
        self.x = x
        self.y = y
        self.superposition = superposition

    def __repr__(self) -> str:
        return f"Cell(x={self.x}, y={self.y}, modules={[module.index for module in self.superposition]})"

    @property
    def coords(self) -> tuple[int, int]:
        return self.x, self.y

    @property
    def entropy(self) -> int:
        """The number of modules still possible (minimum remaining values heuristic)."""
        return len(self.superposition)

    @property
    def is_collapsed(self) -> bool:
        return len(self.superposition) == 1

    @property
    def is_contradiction(self) -> bool:
        return not self.superposition

    @property
    def module(self) -> Module | None:
        """The committed module, or the first one still possible if the cell is undetermined, or None if empty."""
        return self.superposition[0] if self.superposition else None

    def collapse(self, rng: Random) -> Module:
        """Commits the cell to one of its possible modules, chosen uniformly at random.

        Args:
            rng: The generator of the current solve, the only source of randomness.

        Returns:
            The chosen module.
        """
        module = self.superposition[rng.randrange(len(self.superposition))]
        self.superposition = [module]
        return module

    def restrict(self, predicate: ModulePredicate) -> bool:
        """Keeps only the modules accepted by a predicate.

        Returns:
            True if the superposition shrank, False otherwise.
        """
        remaining = [module for module in self.superposition if predicate(module)]
        if len(remaining) == len(self.superposition):
            return False
        self.superposition = remaining
        return True

    def restrict_to_mask(self, mask: NDArray[np.bool_]) -> bool:
        """Keeps only the modules whose index is True in a boolean array over the catalog.

        Returns:
            True if the superposition shrank, False otherwise.
        """
        return self.restrict(lambda module: bool(mask[module.index]))


class PossibilitySpace:
    """The width x height grid of cells, stored as a flat list indexed by 'y * width + x'.

    Between initialization and the first collapse, callers may narrow down any cell's superposition to encode hard
    constraints (e.g. forcing the top row to show sky), either through 'constrain()' / 'constrain_border()' or by
    assigning 'cell.superposition' directly.

    Attributes:
        catalog: The modules every cell starts out with.
        width: The number of columns of the grid.
        height: The number of rows of the grid.
    """

    catalog: ModuleCatalog
    width: int
    height: int

    # All cells of the grid in row-major order.
    _cells: list[Cell]

    def __init__(self, catalog: ModuleCatalog, width: int, height: int) -> None:
        """Allocates the grid, every cell holding the full catalog.

        Raises:
            InvalidConfigurationError: If the catalog is empty or the width or height is not positive.
        """
        if len(catalog) == 0:
            raise InvalidConfigurationError("the module catalog needs at least one module")
        if width <= 0 or height <= 0:
            raise InvalidConfigurationError(f"the grid size must be positive, got {width}x{height}")

        self.catalog = catalog
        self.width = width
        self.height = height

        self._cells = [Cell(x, y, list(catalog)) for y in range(height) for x in range(width)]

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __getitem__(self, index: int) -> Cell:
        return self._cells[index]

    def index(self, x: int, y: int) -> int:
        """Returns the flat index of the cell at (x, y)."""
        if not self.contains(x, y):
            raise IndexError(f"cell ({x}, {y}) is outside the {self.width}x{self.height} grid")
        return y * self.width + x

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        """Returns the cell at (x, y)."""
        return self._cells[self.index(x, y)]

    def neighbors(self, x: int, y: int) -> Iterator[tuple[Direction, Cell]]:
        """Yields the (direction, cell) pairs of all neighbors of (x, y) that lie within the grid."""
        for direction in Direction:
            dx, dy = direction.to_vector()
            neighbor_x = x + dx
            neighbor_y = y + dy
            if self.contains(neighbor_x, neighbor_y):
                yield direction, self._cells[neighbor_y * self.width + neighbor_x]

    def border_cells(self, direction: Direction) -> list[Cell]:
        """Returns the cells along one side of the grid (e.g. the top row for Direction.UP)."""
        match direction:
            case Direction.UP:
                return [self.cell(x, 0) for x in range(self.width)]
            case Direction.DOWN:
                return [self.cell(x, self.height - 1) for x in range(self.width)]
            case Direction.LEFT:
                return [self.cell(0, y) for y in range(self.height)]
            case Direction.RIGHT:
                return [self.cell(self.width - 1, y) for y in range(self.height)]

    def constrain(self, x: int, y: int, predicate: ModulePredicate) -> bool:
        """Keeps only the modules of the cell at (x, y) accepted by a predicate.

        Returns:
            True if the cell's superposition shrank, False otherwise.
        """
        return self.cell(x, y).restrict(predicate)

    def constrain_border(self, direction: Direction, predicate: ModulePredicate) -> int:
        """Keeps only the modules accepted by a predicate in all cells along one side of the grid.

        Returns:
            The number of cells whose superposition shrank.
        """
        return sum(cell.restrict(predicate) for cell in self.border_cells(direction))

    def reset(self) -> None:
        """Puts the full catalog back into every cell."""
        for cell in self._cells:
            cell.superposition = list(self.catalog)

    def snapshot(self) -> SpaceSnapshot:
        """Captures the superpositions of all cells."""
        return tuple(tuple(module.index for module in cell.superposition) for cell in self._cells)

    def restore(self, snapshot: SpaceSnapshot) -> None:
        """Restores the superpositions captured by 'snapshot()'."""
        if len(snapshot) != len(self._cells):
            raise ValueError(f"snapshot holds {len(snapshot)} cells, the grid has {len(self._cells)}")
        for cell, indices in zip(self._cells, snapshot):
            cell.superposition = [self.catalog[index] for index in indices]

    def is_solved(self) -> bool:
        """Checks whether every cell is collapsed."""
        return all(cell.is_collapsed for cell in self._cells)

    def find_contradiction(self) -> tuple[int, int] | None:
        """Returns the coords of the first cell with an empty superposition, or None."""
        for cell in self._cells:
            if cell.is_contradiction:
                return cell.coords
        return None
