"""
Tests for the world generation API.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from py_empire.api import main
from py_empire.api.main import app

SMALL_WORLD = {"seed": "api", "width": 40, "height": 30, "smooth": 1, "num_city": 15}


class TestWorldAPI:
    """Test world generation and query endpoints."""

    def setup_method(self):
        """Set up test client with an empty world store."""
        main._worlds.clear()
        self.client = TestClient(app)

    def generate(self, **overrides):
        payload = dict(SMALL_WORLD, **overrides)
        response = self.client.post("/worlds/generate", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "worlds": 0}

    def test_generate_world(self):
        data = self.generate()
        assert data["seed"] == "api"
        assert data["width"] == 40
        assert data["height"] == 30
        assert data["cities"] == 15
        assert data["land_cells"] + data["sea_cells"] == 1200
        assert set(data["starts"]) == {"PLAYER_1", "PLAYER_2"}
        assert data["continents"] >= 1
        assert data["generation_time_seconds"] >= 0

    def test_same_seed_same_summary(self):
        first = self.generate()
        second = self.generate()
        assert first["id"] != second["id"]
        assert first["starts"] == second["starts"]
        assert first["land_cells"] == second["land_cells"]

    def test_random_seed_assigned(self):
        data = self.generate(seed=None)
        assert data["seed"]

    def test_list_and_get(self):
        first = self.generate()
        second = self.generate(seed="other")
        listed = self.client.get("/worlds").json()
        assert [w["id"] for w in listed] == [second["id"], first["id"]]

        response = self.client.get(f"/worlds/{first['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == first["id"]

    def test_cities(self):
        world = self.generate()
        cities = self.client.get(f"/worlds/{world['id']}/cities").json()
        assert len(cities) == 15
        for city in cities:
            assert city["loc"] == city["row"] * 40 + city["col"]

        owned = self.client.get(
            f"/worlds/{world['id']}/cities", params={"owned_only": True}
        ).json()
        assert sorted(city["owner"] for city in owned) == ["PLAYER_1", "PLAYER_2"]
        assert {city["loc"] for city in owned} == set(world["starts"].values())

    def test_continents(self):
        world = self.generate()
        continents = self.client.get(f"/worlds/{world['id']}/continents").json()
        assert len(continents) == world["continents"]
        assert [c["rank"] for c in continents] == list(range(len(continents)))
        values = [c["value"] for c in continents]
        assert values == sorted(values, reverse=True)
        for continent in continents:
            assert len(continent["city_ids"]) == continent["city_count"]

    def test_text_map(self):
        world = self.generate()
        response = self.client.get(f"/worlds/{world['id']}/map")
        assert response.status_code == 200
        rows = response.text.split("\n")
        assert len(rows) == 30
        assert sum(row.count("o") for row in rows) == 15

        plain = self.client.get(
            f"/worlds/{world['id']}/map", params={"show_cities": False}
        ).text
        assert "o" not in plain

    def test_box_map(self):
        data = self.generate(box_map=True, num_players=4)
        assert data["continents"] == 0
        assert len(data["starts"]) == 4

    @pytest.mark.parametrize("path", ["", "/cities", "/continents", "/map"])
    def test_unknown_world(self, path):
        response = self.client.get(f"/worlds/not-a-world{path}")
        assert response.status_code == 404

    def test_invalid_parameters(self):
        response = self.client.post("/worlds/generate", json={"water_ratio": 95})
        assert response.status_code == 422

        response = self.client.post("/worlds/generate", json={"num_players": 0})
        assert response.status_code == 422

    def test_generation_failure(self):
        # one city per map never forms a continent
        payload = {"seed": "fail", "width": 8, "height": 8, "num_city": 1}
        with patch.object(main.settings, "max_generation_attempts", 3):
            response = self.client.post("/worlds/generate", json=payload)
        assert response.status_code == 422
        assert "World generation failed" in response.json()["detail"]
        assert self.client.get("/health").json()["worlds"] == 0

    def test_oldest_world_evicted(self):
        with patch.object(main.settings, "max_stored_worlds", 2):
            first = self.generate(seed="a")
            self.generate(seed="b")
            self.generate(seed="c")
        ids = [w["id"] for w in self.client.get("/worlds").json()]
        assert len(ids) == 2
        assert first["id"] not in ids
