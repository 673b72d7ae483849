"""Shared fixtures: build small hand-drawn worlds from text."""

import numpy as np
import pytest

from py_empire.core.cities import City
from py_empire.core.grid import GridConfig, Terrain, WorldMap

SYMBOLS = {".": Terrain.SEA, "+": Terrain.LAND, "o": Terrain.CITY}


def world_from_text(lines):
    """
    Build a world from rows of '.', '+' and 'o'.

    Cities are numbered in scan order. The outermost ring is off-board as
    on every generated map.
    """
    config = GridConfig(len(lines[0]), len(lines))
    terrain = np.array([SYMBOLS[ch] for line in lines for ch in line], dtype=np.int8)
    world = WorldMap.from_terrain(config, terrain)

    cities = []
    for loc in np.flatnonzero(world.terrain == Terrain.CITY):
        city = City(id=len(cities), loc=int(loc))
        world.city_ids[loc] = city.id
        cities.append(city)
    return world, cities


@pytest.fixture
def build_world():
    """Factory fixture returning (world, cities) for a text map."""
    return world_from_text
