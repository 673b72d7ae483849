"""
Terrain classification.

Turns a height field into land and sea by choosing a water line that meets
the requested water percentage while leaving enough land for every city.
Also provides the deterministic "box" map: one centred rectangle of land.
"""

from typing import NamedTuple

import numpy as np
import structlog

from .grid import GridConfig, Terrain, WorldMap
from .heightmap_generator import MAX_HEIGHT

logger = structlog.get_logger()


class BoxBounds(NamedTuple):
    """Half-open rectangle of land used by box mode."""
    top: int
    bottom: int
    left: int
    right: int

    def contains(self, row: int, col: int) -> bool:
        return self.top <= row < self.bottom and self.left <= col < self.right


def box_bounds(config: GridConfig) -> BoxBounds:
    """The centred land rectangle covering the middle half of each axis."""
    return BoxBounds(
        top=config.height // 4,
        bottom=config.height * 3 // 4,
        left=config.width // 4,
        right=config.width * 3 // 4,
    )


def find_water_line(heights: np.ndarray, water_ratio: int, num_city: int) -> int:
    """
    Find the highest height that is still water.

    Scans heights upward, accumulating cell counts, and stops at the first
    height where the water share exceeds ``water_ratio`` percent while the
    cells above it can still hold ``num_city`` cities.

    Returns:
        The water line, or MAX_HEIGHT (everything is sea) when no height
        satisfies both conditions.
    """
    flat = np.asarray(heights).ravel()
    size = flat.size
    height_count = np.bincount(flat, minlength=MAX_HEIGHT + 1)

    total = 0
    for h in range(MAX_HEIGHT + 1):
        total += int(height_count[h])
        if total * 100 // size > water_ratio and size - total >= num_city:
            return h
    return MAX_HEIGHT


def classify_terrain(
    config: GridConfig, heights: np.ndarray, water_ratio: int, num_city: int
) -> WorldMap:
    """
    Build the world map from a height field.

    Cells at or below the water line become sea, the rest land. The border
    ring is off-board regardless of terrain.
    """
    flat = np.asarray(heights).ravel()
    water_line = find_water_line(flat, water_ratio, num_city)
    terrain = np.where(flat > water_line, Terrain.LAND, Terrain.SEA).astype(np.int8)
    world = WorldMap.from_terrain(config, terrain)

    if water_line == MAX_HEIGHT:
        logger.warning(
            "No water line leaves room for all cities, map is all sea",
            water_ratio=water_ratio,
            num_city=num_city,
        )
    else:
        logger.debug(
            "Terrain classified",
            water_line=water_line,
            land_cells=world.count(Terrain.LAND),
            sea_cells=world.count(Terrain.SEA),
        )
    return world


def make_box_map(config: GridConfig) -> WorldMap:
    """Deterministic map: a single centred rectangle of land in the sea."""
    bounds = box_bounds(config)
    terrain = np.full((config.height, config.width), Terrain.SEA, dtype=np.int8)
    terrain[bounds.top:bounds.bottom, bounds.left:bounds.right] = Terrain.LAND
    logger.debug("Box map created", bounds=bounds._asdict())
    return WorldMap.from_terrain(config, terrain)
