"""
Rectangular world grid.

Cells are addressed by a flat location index ``loc = row * width + col``.
Per-cell state lives in parallel NumPy arrays on ``WorldMap`` so whole-map
passes (classification, candidate scans, rendering) stay vectorized while the
per-cell view needed by other subsystems is available through ``cell()``.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Tuple

import numpy as np

NO_CITY = -1
NO_UNIT = -1

# Eight grid neighbours, clockwise from north: (row offset, col offset)
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
)


class GridConfig(NamedTuple):
    """Grid dimensions in cells."""
    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height


class Terrain(IntEnum):
    """Terrain kind of a cell."""
    SEA = 0
    LAND = 1
    CITY = 2


TEXT_SYMBOLS = {Terrain.SEA: ".", Terrain.LAND: "+", Terrain.CITY: "o"}


@dataclass(frozen=True)
class WorldCell:
    """Snapshot of one cell's persistent state."""

    terrain: Terrain
    on_board: bool
    city_id: int = NO_CITY
    unit_id: int = NO_UNIT

    @property
    def has_city(self) -> bool:
        return self.city_id != NO_CITY


def chebyshev_distance(a: int, b: int, width: int) -> int:
    """Grid distance between two locations: the larger of row and column deltas."""
    ar, ac = divmod(a, width)
    br, bc = divmod(b, width)
    return max(abs(ar - br), abs(ac - bc))


def border_mask(config: GridConfig) -> np.ndarray:
    """Return the on-board flags: everything except the outermost ring."""
    on_board = np.ones((config.height, config.width), dtype=bool)
    on_board[0, :] = False
    on_board[-1, :] = False
    on_board[:, 0] = False
    on_board[:, -1] = False
    return on_board.ravel()


@dataclass
class WorldMap:
    """The real map: terrain, playability and back-references for every cell."""

    config: GridConfig
    terrain: np.ndarray   # int8 Terrain per cell
    on_board: np.ndarray  # bool, False on the border ring
    city_ids: np.ndarray  # int32 index into the city table, NO_CITY if none
    unit_ids: np.ndarray  # int32 occupying unit, maintained by the combat layer

    @classmethod
    def from_terrain(cls, config: GridConfig, terrain: np.ndarray) -> "WorldMap":
        """Build a map from a terrain array with the standard border ring."""
        terrain = np.asarray(terrain, dtype=np.int8).reshape(config.size).copy()
        return cls(
            config=config,
            terrain=terrain,
            on_board=border_mask(config),
            city_ids=np.full(config.size, NO_CITY, dtype=np.int32),
            unit_ids=np.full(config.size, NO_UNIT, dtype=np.int32),
        )

    @classmethod
    def empty(cls, config: GridConfig) -> "WorldMap":
        """An all-sea map."""
        return cls.from_terrain(config, np.full(config.size, Terrain.SEA, dtype=np.int8))

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def size(self) -> int:
        return self.config.size

    def loc(self, row: int, col: int) -> int:
        return row * self.config.width + col

    def row_col(self, loc: int) -> Tuple[int, int]:
        return divmod(loc, self.config.width)

    def dist(self, a: int, b: int) -> int:
        return chebyshev_distance(a, b, self.config.width)

    def distances_from(self, loc: int, locs: np.ndarray) -> np.ndarray:
        """Vectorized ``dist(loc, x)`` for every location in ``locs``."""
        row, col = self.row_col(loc)
        rows, cols = np.divmod(np.asarray(locs, dtype=np.int64), self.config.width)
        return np.maximum(np.abs(rows - row), np.abs(cols - col))

    def neighbors(self, loc: int) -> List[int]:
        """In-grid neighbours of ``loc`` in DIRECTIONS order."""
        row, col = self.row_col(loc)
        result = []
        for dr, dc in DIRECTIONS:
            r, c = row + dr, col + dc
            if 0 <= r < self.config.height and 0 <= c < self.config.width:
                result.append(r * self.config.width + c)
        return result

    def is_shore(self, loc: int) -> bool:
        """True if any neighbouring cell is sea."""
        return any(self.terrain[n] == Terrain.SEA for n in self.neighbors(loc))

    def cell(self, loc: int) -> WorldCell:
        return WorldCell(
            terrain=Terrain(int(self.terrain[loc])),
            on_board=bool(self.on_board[loc]),
            city_id=int(self.city_ids[loc]),
            unit_id=int(self.unit_ids[loc]),
        )

    def land_cells(self) -> np.ndarray:
        """On-board LAND locations in scan order."""
        return np.flatnonzero(self.on_board & (self.terrain == Terrain.LAND))

    def count(self, terrain: Terrain) -> int:
        return int(np.count_nonzero(self.terrain == terrain))

    def symbol(self, loc: int, show_cities: bool = True) -> str:
        """Display character for a cell: blank off-board, '+', '.' or 'o'."""
        if not self.on_board[loc]:
            return " "
        kind = Terrain(int(self.terrain[loc]))
        if kind == Terrain.CITY and not show_cities:
            kind = Terrain.LAND
        return TEXT_SYMBOLS[kind]

    def to_text(self, show_cities: bool = True) -> str:
        """Render the map as text, one line per row."""
        width = self.config.width
        return "\n".join(
            "".join(self.symbol(row * width + col, show_cities) for col in range(width))
            for row in range(self.config.height)
        )
