"""
Continent discovery and ranking.

A continent is a connected mass of land and city cells (8-connected) that
holds at least two cities, at least one of them on the shore. Continents are
valued by their cities first and their land area second:

- the first two cities (one of which is a shore city) are the baseline
  and add nothing,
- every further shore city is worth 3 points, every further inland city 2,
- points are weighted by 1000 and the land cell count is added on top.

The ranked table drives start assignment, so only continents that can be
reached and defended from the sea are considered.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
import structlog

from .cities import City
from .grid import Terrain, WorldMap

logger = structlog.get_logger()

MAX_CONT = 10  # most continents tracked per generation attempt

MIN_CITIES = 2
MIN_SHORE_CITIES = 1


def continent_value(city_count: int, shore_count: int, land_count: int) -> int:
    """Score a continent from its city, shore city and land cell counts."""
    inland = city_count - shore_count
    if city_count == shore_count:
        points = (shore_count - 2) * 3
    else:
        points = (shore_count - 1) * 3 + (inland - 1) * 2
    return points * 1000 + land_count


@dataclass
class ContinentRecord:
    """A landmass accepted as a continent."""

    value: int
    city_count: int
    shore_count: int
    land_count: int
    first_loc: int
    cities: List[City] = field(default_factory=list)

    @property
    def inland_count(self) -> int:
        return self.city_count - self.shore_count


class ContinentAnalyzer:
    """Flood-fills landmasses in scan order and ranks the good ones."""

    def __init__(
        self, world: WorldMap, cities: Sequence[City], max_continents: int = MAX_CONT
    ):
        """
        Args:
            world: Map with cities placed
            cities: City table indexed by ``world.city_ids``
            max_continents: Stop once this many continents are accepted
        """
        self.world = world
        self.cities = cities
        self.max_continents = max_continents
        self.visited = np.zeros(world.size, dtype=bool)

    def find_continents(self) -> List[ContinentRecord]:
        """
        Return accepted continents, highest value first.

        Equal values keep discovery order. Scanning stops as soon as the
        table is full, so land further along the scan may go unexamined.
        """
        self.visited[:] = False
        ranked: List[ContinentRecord] = []
        rejected = 0

        for loc in range(self.world.size):
            if len(ranked) >= self.max_continents:
                break
            if (
                self.visited[loc]
                or not self.world.on_board[loc]
                or self.world.terrain[loc] == Terrain.SEA
            ):
                continue

            record = self._mark_continent(loc)
            if record.city_count < MIN_CITIES or record.shore_count < MIN_SHORE_CITIES:
                rejected += 1
                continue
            self._insert_ranked(ranked, record)

        logger.info(
            f"Found {len(ranked)} continents",
            rejected=rejected,
            values=[record.value for record in ranked],
        )
        return ranked

    def _mark_continent(self, seed: int) -> ContinentRecord:
        """Visit every land cell connected to ``seed`` and tally it."""
        world = self.world
        city_count = 0
        shore_count = 0
        land_count = 0
        cities: List[City] = []

        self.visited[seed] = True
        stack = [seed]
        while stack:
            loc = stack.pop()
            land_count += 1

            if world.terrain[loc] == Terrain.CITY:
                cities.append(self.cities[int(world.city_ids[loc])])
                city_count += 1
                if world.is_shore(loc):
                    shore_count += 1

            for neighbor in world.neighbors(loc):
                if (
                    not self.visited[neighbor]
                    and world.on_board[neighbor]
                    and world.terrain[neighbor] != Terrain.SEA
                ):
                    self.visited[neighbor] = True
                    stack.append(neighbor)

        return ContinentRecord(
            value=continent_value(city_count, shore_count, land_count),
            city_count=city_count,
            shore_count=shore_count,
            land_count=land_count,
            first_loc=seed,
            cities=cities,
        )

    @staticmethod
    def _insert_ranked(ranked: List[ContinentRecord], record: ContinentRecord) -> None:
        """Append and bubble up past strictly lower values."""
        ranked.append(record)
        i = len(ranked) - 1
        while i > 0 and record.value > ranked[i - 1].value:
            ranked[i] = ranked[i - 1]
            ranked[i - 1] = record
            i -= 1


def find_continents(
    world: WorldMap, cities: Sequence[City], max_continents: int = MAX_CONT
) -> List[ContinentRecord]:
    """Convenience wrapper around ContinentAnalyzer."""
    return ContinentAnalyzer(world, cities, max_continents).find_continents()
