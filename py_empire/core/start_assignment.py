"""
Starting city assignment.

Each player receives one city. By default the continents come from the
middle of the ranked pair table so neither of the first two players starts
with a clearly better landmass; further players walk forward through the
table. A city is only taken if it is far enough from every start already
handed out; when that keeps failing the search widens to any continent and
finally to any unowned city on the map.

Box maps skip the ranking and seat players at the city nearest to a fixed
point inside each corner of the land rectangle.
"""

from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .cities import PLAYERS, City, Owner, UnitType
from .continents import ContinentRecord
from .exceptions import AssignmentError, NoContinentsError
from .grid import GridConfig, WorldMap
from .pairing import RankedPair, balanced_pair_index
from .terrain import box_bounds

logger = structlog.get_logger()

MIN_PLAYER_SEPARATION = 8
MAX_DRAWS = 1000
UNSEEN = " "

ProductionSelector = Callable[[City], None]


class ViewMap:
    """What one owner knows about the map."""

    def __init__(self, owner: Owner, config: GridConfig):
        self.owner = owner
        self.config = config
        self.contents = np.full(config.size, UNSEEN, dtype="<U1")
        self.seen = np.zeros(config.size, dtype=bool)

    def reveal(self, world: WorldMap, loc: int) -> None:
        """Show ``loc`` and its on-board neighbours as they are on the real map."""
        for cell in [loc] + world.neighbors(loc):
            if world.on_board[cell]:
                self.contents[cell] = world.symbol(cell)
                self.seen[cell] = True

    def reveal_all(self, world: WorldMap) -> None:
        """Lift the fog of war from every on-board cell."""
        for loc in np.flatnonzero(world.on_board):
            self.contents[loc] = world.symbol(int(loc))
        self.seen |= world.on_board

    def is_known(self, loc: int) -> bool:
        return bool(self.seen[loc])


class StartAssignor:
    """Hands out one starting city per player."""

    def __init__(
        self,
        world: WorldMap,
        cities: Sequence[City],
        prng: AleaPRNG,
        views: Optional[Dict[Owner, ViewMap]] = None,
        min_separation: int = MIN_PLAYER_SEPARATION,
        max_draws: int = MAX_DRAWS,
        sim_mode: bool = False,
        select_production: Optional[ProductionSelector] = None,
    ):
        """
        Args:
            world: Map with cities placed
            cities: City table
            prng: Random source
            views: Per-owner view maps; missing owners get a fresh one
            min_separation: Minimum distance between two starting cities
            max_draws: Random draws on the target continent before widening
            sim_mode: Unattended play, every start builds armies
            select_production: Called with each new start outside sim mode
        """
        self.world = world
        self.cities = cities
        self._prng = prng
        self.views = views if views is not None else {}
        self.min_separation = min_separation
        self.max_draws = max_draws
        self.sim_mode = sim_mode
        self.select_production = select_production
        self.starts: Dict[Owner, City] = {}

    def target_continents(
        self, continents: Sequence[ContinentRecord], pairs: Sequence[RankedPair], num_players: int
    ) -> List[int]:
        """
        Pick a continent index for each player from the pair table.

        Players beyond the second step forward from the balanced pair and
        wrap to the top of the table, so they never land in its lower half.
        """
        index = balanced_pair_index(len(continents))
        balanced = pairs[index]
        targets = [balanced.second, balanced.first]
        wrap = index + 1
        for _ in range(2, num_players):
            index = (index + 1) % wrap
            targets.append(pairs[index].first)
        return targets[:num_players]

    def assign(
        self,
        continents: Sequence[ContinentRecord],
        pairs: Sequence[RankedPair],
        players: Sequence[Owner] = PLAYERS[:2],
    ) -> Dict[Owner, City]:
        """
        Assign a starting city to each player, in order.

        Raises:
            NoContinentsError: ``continents`` is empty
            AssignmentError: A player cannot be given any unowned city
        """
        if not continents:
            raise NoContinentsError("Cannot assign starts without continents")

        targets = self.target_continents(continents, pairs, len(players))
        for owner, target in zip(players, targets):
            city = self._draw(continents[target], self.max_draws)
            if city is None:
                logger.warning(
                    "Target continent exhausted, searching all continents",
                    owner=owner.name,
                    continent=target,
                )
                city = self._draw_any_continent(continents)
            if city is None:
                logger.warning(
                    "No well separated city left, taking any unowned city",
                    owner=owner.name,
                )
                city = self._first_unowned()
            if city is None:
                raise AssignmentError(f"No unowned city left for {owner.name}")
            self._claim(city, owner)

        return self.starts

    def assign_corners(self, players: Sequence[Owner] = PLAYERS[:2]) -> Dict[Owner, City]:
        """
        Seat each player at the unowned city nearest a corner of the box map.

        Raises:
            AssignmentError: More than four players, or no city in the box
        """
        if len(players) > 4:
            raise AssignmentError(f"Box maps seat at most 4 players, got {len(players)}")

        bounds = box_bounds(self.world.config)
        corners = [
            self.world.loc(bounds.top + 2, bounds.left + 2),
            self.world.loc(bounds.top + 2, bounds.right - 3),
            self.world.loc(bounds.bottom - 3, bounds.left + 2),
            self.world.loc(bounds.bottom - 3, bounds.right - 3),
        ]

        for owner, target in zip(players, corners):
            best = None
            best_dist = None
            for city in self.cities:
                if city.owner != Owner.UNOWNED or not city.placed:
                    continue
                if not bounds.contains(*self.world.row_col(city.loc)):
                    continue
                d = self.world.dist(city.loc, target)
                if best is None or d < best_dist:
                    best, best_dist = city, d
            if best is None:
                raise AssignmentError(f"No unowned city in the box for {owner.name}")
            self._claim(best, owner)

        return self.starts

    def _acceptable(self, city: City) -> bool:
        if city.owner != Owner.UNOWNED:
            return False
        return all(
            self.world.dist(city.loc, start.loc) >= self.min_separation
            for start in self.starts.values()
        )

    def _draw(self, continent: ContinentRecord, draws: int) -> Optional[City]:
        for _ in range(draws):
            city = continent.cities[self._prng.randint(len(continent.cities))]
            if self._acceptable(city):
                return city
        return None

    def _draw_any_continent(self, continents: Sequence[ContinentRecord]) -> Optional[City]:
        for continent in continents:
            city = self._draw(continent, 1)
            if city is not None:
                return city
        return None

    def _first_unowned(self) -> Optional[City]:
        for city in self.cities:
            if city.placed and city.owner == Owner.UNOWNED:
                return city
        return None

    def _view(self, owner: Owner) -> ViewMap:
        if owner not in self.views:
            self.views[owner] = ViewMap(owner, self.world.config)
        return self.views[owner]

    def _claim(self, city: City, owner: Owner) -> None:
        city.owner = owner
        city.work = 0
        self._view(owner).reveal(self.world, city.loc)

        if self.sim_mode:
            city.prod = UnitType.ARMY
        else:
            city.prod = None
            if self.select_production is not None:
                self.select_production(city)

        self.starts[owner] = city
        logger.info(
            "Starting city assigned",
            owner=owner.name,
            city=city.id,
            loc=city.loc,
            row_col=self.world.row_col(city.loc),
        )
