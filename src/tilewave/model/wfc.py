"""Implements the core WFC algorithm: constraint propagation, cell selection and the collapse/retry loop."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import math
import random
from typing import Any, TYPE_CHECKING

import numpy as np

from tilewave.enums import SolveState
from tilewave.errors import ExhaustedError, InvalidConfigurationError
from tilewave.model.fingerprint import DEFAULT_FINGERPRINT_FUNC
from tilewave.model.module_catalog import ModuleCatalog
from tilewave.model.possibility_space import PossibilitySpace

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilewave.model.fingerprint import FingerprintFunc
    from tilewave.model.possibility_space import Cell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveResult:
    """The outcome of 'Wave.collapse()'.

    Attributes:
        state: Either SolveState.SOLVED or SolveState.EXHAUSTED.
        attempts: The number of attempts that were started.
        contradiction: The (x, y) coords of the cell that ran empty in the last failed attempt, if any.
    """

    state: SolveState
    attempts: int
    contradiction: tuple[int, int] | None = None

    @property
    def solved(self) -> bool:
        return self.state == SolveState.SOLVED

    def raise_for_state(self) -> None:
        """Raises an ExhaustedError if no attempt succeeded, does nothing otherwise."""
        if not self.solved:
            raise ExhaustedError(self.attempts, self.contradiction)


class Wave:
    """Solves a grid of modules so that every pair of adjacent cells is compatible.

    The wave starts with every cell able to hold any module of the catalog. It then repeatedly picks the undetermined
    cell with the fewest possible modules, commits it to one of them at random and propagates that decision outward by
    removing now incompatible modules from the neighboring cells. An attempt ends when every cell holds exactly one
    module (success) or some cell holds none (contradiction). After a contradiction the grid is reset to its state
    before solving and a new attempt is made, up to a caller supplied number of attempts.

    A single 'random.Random' seeded in 'initialize()' is the only source of randomness, so identical inputs reproduce
    identical results. Retries keep drawing from the same generator, so attempts are never identical.

    Typical use::

        wave = Wave.from_tiles(images, 8, 8)
        wave.initialize(seed)
        wave.possibility_space.constrain_border(Direction.UP, lambda m: m.fingerprint(Direction.UP) == sky)
        result = wave.collapse(200)
        tilemap = wave.export()

    Attributes:
        catalog: The modules available to every cell.
        possibility_space: The grid of cells, open to caller constraints until 'collapse()' is called.
        state: The current state of the collapse driver.
    """

    catalog: ModuleCatalog
    possibility_space: PossibilitySpace
    state: SolveState

    # Generator created from the seed in initialize(), None before the first initialization.
    _rng: random.Random | None

    def __init__(self, catalog: ModuleCatalog, width: int, height: int) -> None:
        """Creates the wave and allocates its possibility space.

        Raises:
            InvalidConfigurationError: If the catalog is empty or the width or height is not positive.
        """
        self.catalog = catalog
        self.possibility_space = PossibilitySpace(catalog, width, height)
        self.state = SolveState.IDLE
        self._rng = None

    @classmethod
    def from_tiles(
        cls,
        tiles: Iterable[Any],
        width: int,
        height: int,
        fingerprint_func: FingerprintFunc = DEFAULT_FINGERPRINT_FUNC,
    ) -> Wave:
        """Builds the module catalog from tiles and creates a wave over it.

        Args:
            tiles: The tile payloads, by default PIL images.
            width: The number of columns of the grid.
            height: The number of rows of the grid.
            fingerprint_func: A deterministic function mapping (tile, direction) to a fingerprint.
        """
        return cls(ModuleCatalog.from_tiles(tiles, fingerprint_func), width, height)

    @property
    def width(self) -> int:
        return self.possibility_space.width

    @property
    def height(self) -> int:
        return self.possibility_space.height

    def cell(self, x: int, y: int) -> Cell:
        return self.possibility_space.cell(x, y)

    def initialize(self, seed: int) -> None:
        """Resets every cell to the full catalog and seeds the random number generator.

        After this call and before 'collapse()', callers may narrow down the superpositions of the possibility space to
        encode hard constraints.

        Args:
            seed: The seed of the generator used for all random decisions of the solve.
        """
        self.possibility_space.reset()
        self._rng = random.Random(seed)
        self.state = SolveState.IDLE
        logger.debug(
            "Initialized %dx%d wave with %d modules, seed %d", self.width, self.height, len(self.catalog), seed
        )

    def collapse(self, max_attempts: int) -> SolveResult:
        """Runs attempts until the grid is solved or 'max_attempts' attempts ended in a contradiction.

        The superpositions as left by the caller are the starting point of every attempt. Each attempt first propagates
        from every cell, so that the caller's constraints and the catalog's own incompatibilities reach the whole grid
        before the first collapse. When all attempts fail, the grid of the last attempt is kept so callers can still
        export a best-effort result.

        Args:
            max_attempts: The maximum number of attempts (at least 1).

        Returns:
            The outcome of the solve.

        Raises:
            InvalidConfigurationError: If 'max_attempts' is not positive, the wave has not been initialized, a cell has
                no possible module, or the caller's constraints leave a cell without any possible module once
                propagated while the full catalog alone propagates cleanly.
        """
        if max_attempts < 1:
            raise InvalidConfigurationError(f"max_attempts must be at least 1, got {max_attempts}")
        if self._rng is None:
            raise InvalidConfigurationError("initialize() must be called before collapse()")

        space = self.possibility_space

        empty_cell = space.find_contradiction()
        if empty_cell is not None:
            raise InvalidConfigurationError(f"cell {empty_cell} has no possible module before the first collapse")

        initial_snapshot = space.snapshot()
        is_constrained = any(cell.entropy < len(self.catalog) for cell in space)
        all_coords = [cell.coords for cell in space]

        last_contradiction = None
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                space.restore(initial_snapshot)

            self.state = SolveState.RUNNING
            contradiction = self.propagate(*all_coords)

            if contradiction is not None and is_constrained:
                # No random decision was made yet. Blame the constraints only if the bare catalog propagates cleanly.
                is_constrained = False
                if self._propagates_unconstrained(all_coords):
                    space.restore(initial_snapshot)
                    self.state = SolveState.IDLE
                    raise InvalidConfigurationError(
                        f"the constraints leave cell {contradiction} without any possible module"
                    )
                space.restore(initial_snapshot)
                contradiction = self.propagate(*all_coords)

            if contradiction is None:
                contradiction = self._run_attempt()

            if contradiction is None:
                self.state = SolveState.SOLVED
                logger.info("Collapsed %dx%d wave in %d attempt(s)", self.width, self.height, attempt)
                return SolveResult(SolveState.SOLVED, attempt)

            self.state = SolveState.CONTRADICTION
            last_contradiction = contradiction
            logger.debug("Attempt %d/%d ended in a contradiction at %s", attempt, max_attempts, contradiction)

        self.state = SolveState.EXHAUSTED
        logger.warning(
            "Unable to collapse %dx%d wave after %d attempt(s), last contradiction at %s",
            self.width,
            self.height,
            max_attempts,
            last_contradiction,
        )
        return SolveResult(SolveState.EXHAUSTED, max_attempts, last_contradiction)

    def propagate(self, *origins: tuple[int, int]) -> tuple[int, int] | None:
        """Removes modules that lost all support, starting from cells whose superposition shrank.

        For every cell taken from the worklist, each neighbor keeps only the modules that at least one module still
        possible in the cell can legally border. Neighbors that shrank are added to the worklist so the change cascades
        further. Propagation stops at the first cell left without any module.

        Args:
            origins: The (x, y) coords of the cells whose superposition changed.

        Returns:
            The coords of the first cell found empty, or None if no contradiction occurred.
        """
        space = self.possibility_space
        worklist = list(origins)

        while worklist:
            x, y = worklist.pop()
            indices = [module.index for module in space.cell(x, y).superposition]

            for direction, neighbor in space.neighbors(x, y):
                supported_mask = self.catalog.get_supported_mask(indices, direction)
                if neighbor.restrict_to_mask(supported_mask):
                    if neighbor.is_contradiction:
                        return neighbor.coords
                    worklist.append(neighbor.coords)

        return None

    def export(self) -> NDArray[np.int_]:
        """Returns the (height, width) array of module indices of the grid.

        Each cell contributes its committed module, or the first module still possible if it never collapsed, or -1 if
        its superposition is empty. Intended to be called after a solve, or after an exhausted solve for a best-effort
        result.
        """
        tilemap = np.full((self.height, self.width), -1, dtype=np.int_)
        for cell in self.possibility_space:
            if cell.module is not None:
                tilemap[cell.y, cell.x] = cell.module.index
        return tilemap

    def export_tiles(self) -> list[list[Any]]:
        """Returns the rows of tile payloads of the grid, None for cells with an empty superposition."""
        return [
            [cell.module.tile if cell.module is not None else None for cell in self._row(y)] for y in range(self.height)
        ]

    def _row(self, y: int) -> list[Cell]:
        return [self.possibility_space.cell(x, y) for x in range(self.width)]

    def _run_attempt(self) -> tuple[int, int] | None:
        """Collapses cells one by one until the grid is solved or a contradiction occurs."""
        assert self._rng is not None
        while True:
            cell = self._choose_next_cell()
            if cell is None:
                return None

            cell.collapse(self._rng)

            contradiction = self.propagate(cell.coords)
            if contradiction is not None:
                return contradiction

    def _propagates_unconstrained(self, all_coords: list[tuple[int, int]]) -> bool:
        """Checks whether the full catalog in every cell propagates without a contradiction. Leaves the grid reset."""
        self.possibility_space.reset()
        return self.propagate(*all_coords) is None

    def _choose_next_cell(self) -> Cell | None:
        """Picks an undetermined cell with the fewest possible modules, breaking ties at random."""
        assert self._rng is not None
        candidates: list[Cell] = []
        lowest_entropy = math.inf
        for cell in self.possibility_space:
            entropy = cell.entropy
            if entropy <= 1 or entropy > lowest_entropy:
                continue
            if entropy < lowest_entropy:
                lowest_entropy = entropy
                candidates = []
            candidates.append(cell)

        if not candidates:
            return None
        return self._rng.choice(candidates)
