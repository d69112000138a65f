"""Manages the module catalog and the adjacency rules between its modules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, overload, TYPE_CHECKING

import numpy as np

from tilewave.enums import Direction
from tilewave.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilewave.model.fingerprint import Fingerprint, FingerprintFunc
    from tilewave.model.possibility_space import Cell


@dataclass(frozen=True, eq=False)
class Module:
    """A single reusable tile definition, i.e. one possible state of a cell's superposition.

    Modules are created once when the catalog is built and shared (read-only) by every cell that may select them. They
    compare by identity.

    Attributes:
        index: The stable position of the module within its catalog (equal to the index of its input tile).
        adjacency: One fingerprint per direction, indexed by 'Direction.value'.
        tile: The payload of the module (e.g. a PIL image). The solver never inspects it.
    """

    index: int
    adjacency: tuple[Fingerprint, Fingerprint, Fingerprint, Fingerprint]
    tile: Any

    def fingerprint(self, direction: Direction) -> Fingerprint:
        """Returns the fingerprint of the module's edge facing the given direction."""
        return self.adjacency[direction.value]

    def __repr__(self) -> str:
        edges = ", ".join(f"{direction.name}={self.fingerprint(direction)}" for direction in Direction)
        return f"Module({self.index}, {edges})"


def is_compatible(candidate: Module, neighbor: Cell, direction: Direction) -> bool:
    """Checks whether a module could legally sit next to a neighboring cell.

    The neighbor lies one step from the candidate in the given direction. The candidate is compatible if at least one
    module still possible in the neighbor exposes, on its opposite edge, the same fingerprint the candidate exposes
    towards the neighbor.

    Args:
        candidate: The module whose placement is checked.
        neighbor: The cell next to the candidate's position.
        direction: The direction pointing from the candidate's position to the neighbor.

    Returns:
        True if some module in the neighbor's superposition can border the candidate, False otherwise.
    """
    fingerprint = candidate.adjacency[direction.value]
    opposite = direction.reverse().value
    for module in neighbor.superposition:
        if module.adjacency[opposite] == fingerprint:
            return True
    return False


class ModuleCatalog(Sequence[Module]):
    """The fixed, immutable set of modules available to the solver.

    Besides storing the modules, the catalog precomputes the adjacency rules between every pair of modules so that
    the propagation does not have to compare fingerprints in its inner loop. The rules are derived from the
    fingerprints alone and always agree with 'is_compatible()'.
    """

    # The modules of the catalog, the list index equals the module index.
    _modules: list[Module]

    # The 3D boolean array defining compatibility: [m1, m2, direction] is True exactly if module m2 can be placed one
    # step from module m1 in the specified direction.
    _adjacency_rules: NDArray[np.bool_]

    def __init__(self, modules: Iterable[Module]) -> None:
        """Creates the catalog and determines the adjacency rules.

        Args:
            modules: The modules of the catalog, ordered by their indices (0 to n-1).

        Raises:
            InvalidConfigurationError: If there are no modules or the module indices are not 0 to n-1 in order.
        """
        self._modules = list(modules)

        if not self._modules:
            raise InvalidConfigurationError("the module catalog needs at least one module")
        for position, module in enumerate(self._modules):
            if module.index != position:
                raise InvalidConfigurationError(f"module at position {position} has index {module.index}")

        self._determine_adjacency_rules()

    @classmethod
    def from_tiles(cls, tiles: Iterable[Any], fingerprint_func: FingerprintFunc) -> ModuleCatalog:
        """Builds one module per tile, computing its fingerprints in all four directions.

        Args:
            tiles: The tile payloads (e.g. PIL images), the input order defines the module indices.
            fingerprint_func: A deterministic function mapping (tile, direction) to a fingerprint.

        Returns:
            The new module catalog.
        """
        modules = []
        for index, tile in enumerate(tiles):
            up, down, left, right = (fingerprint_func(tile, direction) for direction in Direction)
            modules.append(Module(index, (up, down, left, right), tile))
        return cls(modules)

    @overload
    def __getitem__(self, index: int) -> Module: ...

    @overload
    def __getitem__(self, index: slice) -> list[Module]: ...

    def __getitem__(self, index: int | slice) -> Module | list[Module]:
        return self._modules[index]

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules)

    @property
    def adjacency_rules(self) -> NDArray[np.bool_]:
        """A read-only view of the [m1, m2, direction] adjacency rules array."""
        rules = self._adjacency_rules.view()
        rules.flags.writeable = False
        return rules

    def get_compatible_modules(self, index: int, direction: Direction) -> list[int]:
        """Returns all module indices that may be placed next to a module in the given direction.

        Args:
            index: The index of the module to check compatibility for.
            direction: The direction pointing from that module to its neighbor.

        Returns:
            The indices of all modules that can legally sit one step from the module in that direction.
        """
        return [int(i) for i in np.flatnonzero(self._adjacency_rules[index, :, direction.value])]

    def get_supported_mask(self, indices: Sequence[int], direction: Direction) -> NDArray[np.bool_]:
        """Determines which modules are supported by at least one of several modules.

        Args:
            indices: The indices of the modules still possible in a cell.
            direction: The direction pointing from that cell to its neighbor.

        Returns:
            A boolean array over all module indices, True for each module that can sit one step from at least one of
                the given modules in that direction.
        """
        if not indices:
            return np.zeros(len(self._modules), dtype=bool)
        return self._adjacency_rules[list(indices), :, direction.value].any(axis=0)

    def _determine_adjacency_rules(self) -> None:
        """Compares the fingerprints of all module pairs."""
        self._adjacency_rules = np.full((len(self._modules), len(self._modules), len(Direction)), False, dtype=bool)

        # adjacency_rules[m1, m2, direction] is True if and only if the edge of m1 facing the direction shows the same
        # fingerprint as the opposite edge of m2.
        for direction in Direction:
            opposite = direction.reverse()
            for m1 in self._modules:
                fingerprint = m1.fingerprint(direction)
                for m2 in self._modules:
                    if m2.fingerprint(opposite) == fingerprint:
                        self._adjacency_rules[m1.index, m2.index, direction.value] = True
