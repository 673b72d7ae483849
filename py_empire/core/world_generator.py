"""
World generation pipeline.

Runs height synthesis, terrain classification, city placement, continent
ranking and start assignment in sequence. When a map has too little land
for its cities or yields no usable continent it is thrown away and
generation starts over from a fresh height field. The number of restarts is
capped by ``max_attempts``; ``None`` lifts the cap and will loop forever on
parameters that can never produce a continent.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .cities import PLAYERS, City, CityPlacer, Owner, compute_min_city_dist
from .continents import MAX_CONT, ContinentAnalyzer, ContinentRecord
from .exceptions import InsufficientLandError, NoContinentsError, WorldGenerationError
from .grid import GridConfig, Terrain, WorldMap
from .heightmap_generator import HeightmapGenerator
from .pairing import RankedPair, rank_pairs
from .start_assignment import MIN_PLAYER_SEPARATION, StartAssignor, ViewMap
from .terrain import classify_terrain, make_box_map

logger = structlog.get_logger()


class GenerationOptions(BaseModel):
    """World generation parameters."""

    width: int = Field(default=100, ge=8, description="Map width in cells")
    height: int = Field(default=60, ge=8, description="Map height in cells")
    smooth: int = Field(default=5, ge=0, description="Height smoothing passes")
    water_ratio: int = Field(default=70, ge=10, le=90, description="Percent of map that is water")
    num_city: int = Field(default=70, ge=1, description="Cities on a random map")
    num_city_box: int = Field(default=20, ge=1, description="Cities on a box map")
    min_city_dist: Optional[int] = Field(
        default=None, ge=0, description="Initial city spacing, derived from land per city if unset"
    )
    num_players: int = Field(default=2, ge=1, le=4, description="Players to seat")
    min_player_separation: int = Field(
        default=MIN_PLAYER_SEPARATION, ge=0, description="Minimum distance between starts"
    )
    max_continents: int = Field(default=MAX_CONT, ge=1, description="Continents tracked per attempt")
    box_map: bool = Field(default=False, description="Deterministic rectangular land mass")
    sim_mode: bool = Field(default=False, description="Unattended play, starts build armies")
    reveal_all: bool = Field(default=False, description="Remove fog of war after assignment")
    max_attempts: Optional[int] = Field(
        default=100, ge=1, description="Generation attempts before giving up, None for no limit"
    )
    seed: Optional[str] = Field(default=None, description="Seed for the PRNG")

    @property
    def grid(self) -> GridConfig:
        return GridConfig(self.width, self.height)

    @property
    def city_count(self) -> int:
        """Cities actually placed on the map."""
        return self.num_city_box if self.box_map else self.num_city

    @property
    def table_size(self) -> int:
        return max(self.num_city, self.city_count)

    @property
    def initial_min_city_dist(self) -> int:
        if self.min_city_dist is not None:
            return self.min_city_dist
        return compute_min_city_dist(self.grid, self.water_ratio, self.num_city)


@dataclass
class GeneratedWorld:
    """Everything world generation hands to the rest of the game."""

    options: GenerationOptions
    world: WorldMap
    cities: List[City]
    continents: List[ContinentRecord]
    pairs: List[RankedPair]
    views: Dict[Owner, ViewMap]
    starts: Dict[Owner, City]
    attempts: int
    # (city id, minimum city distance in force when it was placed)
    placement_history: List[Tuple[int, int]] = field(default_factory=list)

    def player_cities(self) -> Dict[Owner, List[City]]:
        """Cities held by each player."""
        held: Dict[Owner, List[City]] = {}
        for city in self.cities:
            if city.owner != Owner.UNOWNED:
                held.setdefault(city.owner, []).append(city)
        return held

    def summary(self) -> Dict:
        world = self.world
        return {
            "width": world.width,
            "height": world.height,
            "land_cells": world.count(Terrain.LAND) + world.count(Terrain.CITY),
            "sea_cells": world.count(Terrain.SEA),
            "cities": sum(1 for city in self.cities if city.placed),
            "continents": len(self.continents),
            "attempts": self.attempts,
            "starts": {owner.name: city.loc for owner, city in self.starts.items()},
        }


class WorldGenerator:
    """Generates a world and seats the players on it."""

    def __init__(
        self,
        options: Optional[GenerationOptions] = None,
        prng: Optional[AleaPRNG] = None,
        select_production: Optional[Callable[[City], None]] = None,
    ):
        """
        Args:
            options: Generation parameters
            prng: Random source; a new one seeded from ``options.seed`` if None
            select_production: Production collaborator for new starts
        """
        self.options = options or GenerationOptions()
        self.prng = prng or AleaPRNG(self.options.seed or "default")
        self.select_production = select_production

    def generate(self) -> GeneratedWorld:
        """
        Run generation until a map with enough land and at least one continent
        comes out.

        Raises:
            PlacementError: The box map cannot hold the requested cities
            AssignmentError: Not enough cities for the players
            WorldGenerationError: ``max_attempts`` maps were discarded
        """
        options = self.options
        logger.info(
            "Starting world generation",
            width=options.width,
            height=options.height,
            water_ratio=options.water_ratio,
            smooth=options.smooth,
            box_map=options.box_map,
        )

        attempt = 0
        while options.max_attempts is None or attempt < options.max_attempts:
            attempt += 1
            try:
                result = self._attempt(attempt)
            except InsufficientLandError as e:
                logger.warning("Too little land, regenerating map", attempt=attempt, error=str(e))
                continue
            except NoContinentsError:
                logger.warning("No usable continents, regenerating map", attempt=attempt)
                continue
            logger.info("World generation complete", **result.summary())
            return result

        raise WorldGenerationError(
            f"No usable map after {attempt} attempts", attempts=attempt
        )

    def _attempt(self, attempt: int) -> GeneratedWorld:
        options = self.options
        config = options.grid

        if options.box_map:
            world = make_box_map(config)
        else:
            heights = HeightmapGenerator(config, self.prng).generate(options.smooth)
            world = classify_terrain(config, heights, options.water_ratio, options.city_count)
            # the water line counts border land, which cannot hold cities
            land = world.land_cells().size
            if land < options.city_count:
                raise InsufficientLandError(
                    f"Attempt {attempt} has {land} on-board land cells "
                    f"for {options.city_count} cities"
                )

        placer = CityPlacer(world, self.prng, options.initial_min_city_dist)
        cities = placer.place(options.city_count, options.table_size)

        players = PLAYERS[:options.num_players]
        views = {owner: ViewMap(owner, config) for owner in players}
        assignor = StartAssignor(
            world,
            cities,
            self.prng,
            views=views,
            min_separation=options.min_player_separation,
            sim_mode=options.sim_mode,
            select_production=self.select_production,
        )

        continents: List[ContinentRecord] = []
        pairs: List[RankedPair] = []
        if options.box_map:
            starts = assignor.assign_corners(players)
        else:
            continents = ContinentAnalyzer(world, cities, options.max_continents).find_continents()
            if not continents:
                raise NoContinentsError(f"Attempt {attempt} found no usable continents")
            pairs = rank_pairs(continents)
            starts = assignor.assign(continents, pairs, players)

        if options.reveal_all:
            for view in views.values():
                view.reveal_all(world)

        return GeneratedWorld(
            options=options,
            world=world,
            cities=cities,
            continents=continents,
            pairs=pairs,
            views=views,
            starts=starts,
            attempts=attempt,
            placement_history=placer.state.history,
        )


def generate_world(
    options: Optional[GenerationOptions] = None,
    prng: Optional[AleaPRNG] = None,
    select_production: Optional[Callable[[City], None]] = None,
) -> GeneratedWorld:
    """Generate a world with the given options."""
    return WorldGenerator(options, prng, select_production).generate()
