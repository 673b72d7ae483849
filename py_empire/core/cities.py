"""
City records and random city placement.

Cities are dropped on land one at a time. A list of still-eligible land
cells is kept; after each pick, every cell closer than the current minimum
city distance is struck from it. When the list runs dry it is rebuilt from
the whole map with the minimum distance shrunk by one, so placement always
finishes as long as there is at least one land cell per city.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .exceptions import PlacementError
from .grid import GridConfig, Terrain, WorldMap

logger = structlog.get_logger()

UNUSED_LOC = -1
NOFUNC = -1


class Owner(IntEnum):
    """Who holds a city."""
    UNOWNED = 0
    PLAYER_1 = 1
    PLAYER_2 = 2
    PLAYER_3 = 3
    PLAYER_4 = 4


PLAYERS: Tuple[Owner, ...] = (
    Owner.PLAYER_1,
    Owner.PLAYER_2,
    Owner.PLAYER_3,
    Owner.PLAYER_4,
)


class UnitType(IntEnum):
    """Piece types a city can produce."""
    ARMY = 0
    FIGHTER = 1
    PATROL = 2
    DESTROYER = 3
    SUBMARINE = 4
    TRANSPORT = 5
    CARRIER = 6
    BATTLESHIP = 7
    SATELLITE = 8


class City(BaseModel):
    """A city on the map."""

    id: int = Field(description="Index in the city table")
    loc: int = Field(default=UNUSED_LOC, description="Map location, -1 if unused")
    owner: Owner = Field(default=Owner.UNOWNED, description="Current owner")
    prod: Optional[UnitType] = Field(
        default=None, description="Unit type in production, None while pending"
    )
    work: int = Field(default=0, description="Production progress")
    func: List[int] = Field(
        default_factory=lambda: [NOFUNC] * len(UnitType),
        description="Default orders for each unit type built here",
    )

    @property
    def placed(self) -> bool:
        return self.loc != UNUSED_LOC


@dataclass
class PlacementState:
    """Working set of the city placer."""

    available: np.ndarray
    min_city_dist: int
    regenerations: int = 0
    # (city id, minimum distance in force when it was placed)
    history: List[Tuple[int, int]] = field(default_factory=list)


def compute_min_city_dist(config: GridConfig, water_ratio: int, num_city: int) -> int:
    """Initial city spacing: square root of the land area available per city."""
    land = config.size * (100 - water_ratio) // 100
    return math.isqrt(land // num_city)


class CityPlacer:
    """Places cities on land with a shrinking minimum separation."""

    def __init__(self, world: WorldMap, prng: AleaPRNG, min_city_dist: int):
        """
        Args:
            world: Classified map; chosen cells are turned into cities in place
            prng: Random source
            min_city_dist: Starting minimum distance between cities
        """
        if min_city_dist < 0:
            raise PlacementError(f"Minimum city distance must be >= 0, got {min_city_dist}")

        self.world = world
        self._prng = prng
        self.state = PlacementState(
            available=np.empty(0, dtype=np.int64), min_city_dist=min_city_dist
        )
        self.cities: List[City] = []

    def place(self, count: int, table_size: Optional[int] = None) -> List[City]:
        """
        Place ``count`` cities and return the city table.

        Args:
            count: Number of cities to put on the map
            table_size: Length of the returned table; entries past ``count``
                are unused sentinel cities

        Raises:
            PlacementError: The land cannot hold ``count`` cities
        """
        table_size = count if table_size is None else table_size
        if table_size < count:
            raise ValueError(f"City table of {table_size} cannot hold {count} cities")

        while len(self.cities) < count:
            while self.state.available.size == 0:
                self._regenerate()

            index = self._prng.randint(self.state.available.size)
            loc = int(self.state.available[index])
            self._found_city(loc)
            self._remove_near(loc)

        for city_id in range(count, table_size):
            self.cities.append(City(id=city_id))

        logger.info(
            f"Placed {count} cities",
            regenerations=self.state.regenerations,
            min_city_dist=self.state.min_city_dist,
        )
        return self.cities

    def _found_city(self, loc: int) -> City:
        city = City(id=len(self.cities), loc=loc)
        self.cities.append(city)
        self.world.terrain[loc] = Terrain.CITY
        self.world.city_ids[loc] = city.id
        self.state.history.append((city.id, self.state.min_city_dist))
        return city

    def _remove_near(self, loc: int) -> None:
        """Drop candidates closer to ``loc`` than the minimum distance."""
        available = self.state.available
        if available.size:
            # the city's own cell always goes, even at distance zero
            limit = max(self.state.min_city_dist, 1)
            keep = self.world.distances_from(loc, available) >= limit
            self.state.available = available[keep]

    def _regenerate(self) -> None:
        """Rebuild the candidate list from every remaining land cell."""
        self.state.available = self.world.land_cells()

        # The first rebuild only seeds the list
        if self.state.regenerations > 0:
            self.state.min_city_dist -= 1
            if self.state.min_city_dist < 0:
                raise PlacementError(
                    f"Not enough land for {len(self.cities) + 1} cities: "
                    "minimum city distance went negative"
                )
            logger.debug(
                "Land exhausted, shrinking city spacing",
                min_city_dist=self.state.min_city_dist,
                placed=len(self.cities),
            )
        self.state.regenerations += 1

        for city in self.cities:
            self._remove_near(city.loc)
