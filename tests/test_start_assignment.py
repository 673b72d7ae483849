"""
Tests for starting city assignment.

Tests cover:
- Target continent selection from the pair table
- Separation between starting cities and the fallback chain
- Ownership, production and view reveal of claimed cities
- Corner seating on box maps
"""

from unittest.mock import Mock

import pytest

from py_empire.core.alea_prng import AleaPRNG
from py_empire.core.cities import PLAYERS, City, Owner, UnitType
from py_empire.core.continents import ContinentRecord, find_continents
from py_empire.core.exceptions import AssignmentError, NoContinentsError
from py_empire.core.grid import GridConfig, Terrain
from py_empire.core.pairing import rank_pairs
from py_empire.core.start_assignment import StartAssignor, ViewMap
from py_empire.core.terrain import make_box_map

ONE_SMALL_CONTINENT = [
    "..........",
    "..........",
    "..o+o.....",
    "..........",
    "..........",
]

WIDE_CONTINENT = [
    "......................",
    ".o+++++++++++++++++++.",
    ".++++++++++++++++++++.",
    ".+++++++++o+++++++++o.",
    "......................",
]


def assignor_for(world, cities, seed="assign", **kwargs):
    return StartAssignor(world, cities, AleaPRNG(seed), **kwargs)


class TestTargetContinents:
    """Test continent choice per player."""

    def test_balanced_pair_for_first_two(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        pairs = rank_pairs(continents)
        targets = assignor_for(world, cities).target_continents(continents, pairs, 2)
        assert targets == [0, 0]

    def test_additional_players_step_through_pairs(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        assignor = assignor_for(world, cities)
        continents = find_continents(world, cities) * 3
        pairs = rank_pairs(continents)
        # middle pair is index 4, the last one in reach; players three and
        # four wrap to pairs 0 and 1
        targets = assignor.target_continents(continents, pairs, 4)
        assert targets[0] == pairs[4].second
        assert targets[1] == pairs[4].first
        assert targets[2:] == [pairs[0].first, pairs[1].first]

    def test_step_wraps_after_middle_pair(self):
        continents = [
            ContinentRecord(value=9, city_count=2, shore_count=1, land_count=9, first_loc=0),
            ContinentRecord(value=3, city_count=2, shore_count=2, land_count=3, first_loc=1),
        ]
        pairs = rank_pairs(continents)
        assignor = StartAssignor(None, [], AleaPRNG("wrap"))
        # middle pair is index 2; the lower entry 3 is never used
        targets = assignor.target_continents(continents, pairs, 4)
        assert targets == [
            pairs[2].second,
            pairs[2].first,
            pairs[0].first,
            pairs[1].first,
        ]
        assert targets == [1, 1, 0, 0]

    def test_step_wraps_around(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        pairs = rank_pairs(continents)
        targets = assignor_for(world, cities).target_continents(continents, pairs, 4)
        assert targets == [0, 0, 0, 0]

    def test_single_player(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        targets = assignor_for(world, cities).target_continents(
            continents, rank_pairs(continents), 1
        )
        assert len(targets) == 1


class TestAssign:
    """Test the draw and fallback chain."""

    def test_two_players_one_small_continent(self, build_world):
        """Separation cannot be met, so the last resort seats player two."""
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        assert len(continents) == 1 and continents[0].city_count == 2

        starts = assignor_for(world, cities).assign(continents, rank_pairs(continents))

        assert set(starts) == {Owner.PLAYER_1, Owner.PLAYER_2}
        assert {city.id for city in starts.values()} == {0, 1}
        assert {city.owner for city in cities} == {Owner.PLAYER_1, Owner.PLAYER_2}

    def test_separation_respected_when_possible(self, build_world):
        world, cities = build_world(WIDE_CONTINENT)
        continents = find_continents(world, cities)
        for seed in ("a", "b", "c", "d"):
            for city in cities:
                city.owner = Owner.UNOWNED
            assignor = assignor_for(world, cities, seed=seed)
            starts = assignor.assign(continents, rank_pairs(continents))
            first, second = starts[Owner.PLAYER_1], starts[Owner.PLAYER_2]
            assert world.dist(first.loc, second.loc) >= 8

    def test_every_player_gets_distinct_city(self, build_world):
        world, cities = build_world(WIDE_CONTINENT)
        continents = find_continents(world, cities)
        starts = assignor_for(world, cities, min_separation=0).assign(
            continents, rank_pairs(continents), PLAYERS[:3]
        )
        assert len({city.id for city in starts.values()}) == 3

    def test_not_enough_cities(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        with pytest.raises(AssignmentError):
            assignor_for(world, cities).assign(continents, rank_pairs(continents), PLAYERS[:3])

    def test_no_continents(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        with pytest.raises(NoContinentsError):
            assignor_for(world, cities).assign([], [])

    def test_claim_resets_work_and_reveals(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        for city in cities:
            city.work = 17
        continents = find_continents(world, cities)
        assignor = assignor_for(world, cities)
        starts = assignor.assign(continents, rank_pairs(continents))

        for owner, city in starts.items():
            assert city.work == 0
            view = assignor.views[owner]
            assert view.is_known(city.loc)
            assert view.contents[city.loc] == "o"
            assert all(view.is_known(n) for n in world.neighbors(city.loc))

    def test_production_left_pending_and_collaborator_called(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        select_production = Mock()
        starts = assignor_for(world, cities, select_production=select_production).assign(
            continents, rank_pairs(continents)
        )
        assert select_production.call_count == 2
        called_with = {call.args[0].id for call in select_production.call_args_list}
        assert called_with == {city.id for city in starts.values()}

    def test_sim_mode_builds_armies(self, build_world):
        world, cities = build_world(ONE_SMALL_CONTINENT)
        continents = find_continents(world, cities)
        select_production = Mock()
        starts = assignor_for(
            world, cities, sim_mode=True, select_production=select_production
        ).assign(continents, rank_pairs(continents))
        assert all(city.prod == UnitType.ARMY for city in starts.values())
        select_production.assert_not_called()

    def test_assignment_is_deterministic(self, build_world):
        results = []
        for _ in range(2):
            world, cities = build_world(WIDE_CONTINENT)
            continents = find_continents(world, cities)
            starts = assignor_for(world, cities, seed="same").assign(
                continents, rank_pairs(continents), PLAYERS[:2]
            )
            results.append({owner: city.id for owner, city in starts.items()})
        assert results[0] == results[1]


def box_world_with_cities(config, positions):
    world = make_box_map(config)
    cities = []
    for row, col in positions:
        loc = world.loc(row, col)
        city = City(id=len(cities), loc=loc)
        world.terrain[loc] = Terrain.CITY
        world.city_ids[loc] = city.id
        cities.append(city)
    return world, cities


class TestAssignCorners:
    """Test box-map corner seating."""

    POSITIONS = [(10, 10), (6, 6), (6, 13), (13, 6), (13, 13)]

    def test_nearest_city_to_each_corner(self):
        world, cities = box_world_with_cities(GridConfig(20, 20), self.POSITIONS)
        starts = assignor_for(world, cities).assign_corners(PLAYERS)
        assert [starts[owner].id for owner in PLAYERS] == [1, 2, 3, 4]
        assert cities[0].owner == Owner.UNOWNED

    def test_ties_go_to_lowest_city_id(self):
        # both cities are two cells from the top-left target (7, 7)
        world, cities = box_world_with_cities(GridConfig(20, 20), [(9, 9), (5, 5)])
        starts = assignor_for(world, cities).assign_corners(PLAYERS[:1])
        assert starts[Owner.PLAYER_1].id == 0

    def test_falls_back_to_next_nearest(self):
        world, cities = box_world_with_cities(GridConfig(20, 20), [(10, 10), (6, 6)])
        starts = assignor_for(world, cities).assign_corners(PLAYERS[:2])
        assert starts[Owner.PLAYER_1].id == 1
        assert starts[Owner.PLAYER_2].id == 0

    def test_runs_out_of_cities(self):
        world, cities = box_world_with_cities(GridConfig(20, 20), [(10, 10)])
        with pytest.raises(AssignmentError):
            assignor_for(world, cities).assign_corners(PLAYERS[:2])

    def test_ignores_unused_cities(self):
        world, cities = box_world_with_cities(GridConfig(20, 20), [(10, 10)])
        cities.append(City(id=1))
        starts = assignor_for(world, cities).assign_corners(PLAYERS[:1])
        assert starts[Owner.PLAYER_1].id == 0


class TestViewMap:
    """Test the per-owner view."""

    def test_starts_unseen(self):
        view = ViewMap(Owner.PLAYER_1, GridConfig(5, 5))
        assert not view.seen.any()
        assert (view.contents == " ").all()

    def test_reveal_all(self, build_world):
        world, _ = build_world(ONE_SMALL_CONTINENT)
        view = ViewMap(Owner.PLAYER_2, world.config)
        view.reveal_all(world)
        assert (view.seen == world.on_board).all()
        assert "".join(view.contents[world.loc(2, c)] for c in range(1, 9)) == ".o+o...."
