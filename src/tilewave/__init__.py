"""Generates tilemaps in which all adjacent tiles match, using the Wave Function Collapse algorithm."""

from tilewave.enums import Direction, SolveState
from tilewave.errors import ExhaustedError, InvalidConfigurationError, TilewaveError
from tilewave.model.fingerprint import DEFAULT_FINGERPRINT_FUNC, Fingerprint, get_color_fingerprint_func
from tilewave.model.module_catalog import is_compatible, Module, ModuleCatalog
from tilewave.model.possibility_space import Cell, PossibilitySpace
from tilewave.model.tileset_manager import TilesetManager
from tilewave.model.wfc import SolveResult, Wave

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_FINGERPRINT_FUNC",
    "Cell",
    "Direction",
    "ExhaustedError",
    "Fingerprint",
    "InvalidConfigurationError",
    "Module",
    "ModuleCatalog",
    "PossibilitySpace",
    "SolveResult",
    "SolveState",
    "TilesetManager",
    "TilewaveError",
    "Wave",
    "get_color_fingerprint_func",
    "is_compatible",
]
