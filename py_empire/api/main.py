"""FastAPI main application."""

import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, ValidationError

from .. import __version__
from ..config import configure_logging, settings
from ..core.cities import Owner
from ..core.exceptions import WorldGenError
from ..core.world_generator import GeneratedWorld, GenerationOptions, generate_world

configure_logging()

logger = structlog.get_logger()

app = FastAPI(
    title="Empire World Generator API",
    description="Land, sea, cities and balanced starting positions",
    version=__version__,
)

# Generated worlds, oldest first
_worlds: "OrderedDict[str, StoredWorld]" = OrderedDict()


@dataclass
class StoredWorld:
    """A generated world kept in memory."""

    id: str
    created_at: datetime
    generation_time_seconds: float
    result: GeneratedWorld


# Request/Response models
class WorldGenerationRequest(BaseModel):
    """Request to generate a new world."""

    seed: Optional[str] = Field(None, description="Random seed for reproducible generation")
    width: int = Field(settings.default_map_width, ge=8, le=settings.max_map_width)
    height: int = Field(settings.default_map_height, ge=8, le=settings.max_map_height)
    smooth: int = Field(5, ge=0, description="Height smoothing passes")
    water_ratio: int = Field(70, ge=10, le=90, description="Percent of map that is water")
    num_city: int = Field(70, ge=1, description="Cities to place")
    num_players: int = Field(2, ge=1, le=4, description="Players to seat")
    box_map: bool = Field(False, description="Deterministic rectangular land mass")
    sim_mode: bool = Field(False, description="Starting cities build armies")
    reveal_all: bool = Field(False, description="Remove fog of war")


class WorldSummary(BaseModel):
    """Summary information about a generated world."""

    id: str
    seed: str
    width: int
    height: int
    land_cells: int
    sea_cells: int
    cities: int
    continents: int
    attempts: int
    starts: Dict[str, int]
    created_at: datetime
    generation_time_seconds: float


class CityInfo(BaseModel):
    """A city as seen by the rest of the game."""

    id: int
    loc: int
    row: int
    col: int
    owner: str
    prod: Optional[str]
    work: int
    shore: bool


class ContinentInfo(BaseModel):
    """A ranked continent."""

    rank: int
    value: int
    city_count: int
    shore_count: int
    land_count: int
    city_ids: List[int]


def _get_world(world_id: str) -> StoredWorld:
    """Get world by ID or raise 404."""
    stored = _worlds.get(world_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="World not found")
    return stored


def _summary(stored: StoredWorld) -> WorldSummary:
    summary = stored.result.summary()
    return WorldSummary(
        id=stored.id,
        seed=stored.result.options.seed,
        created_at=stored.created_at,
        generation_time_seconds=stored.generation_time_seconds,
        **summary,
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Empire World Generator API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "worlds": len(_worlds)}


@app.post("/worlds/generate", response_model=WorldSummary)
def generate(request: WorldGenerationRequest):
    """Generate a world synchronously and keep it for later queries."""
    logger.info("World generation requested", request=request.model_dump())

    seed = request.seed or str(uuid.uuid4())[:8]
    try:
        options = GenerationOptions(
            **request.model_dump(exclude={"seed"}),
            seed=seed,
            max_attempts=settings.max_generation_attempts,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    started = datetime.now(timezone.utc)
    clock = time.perf_counter()
    try:
        result = generate_world(options)
    except WorldGenError as e:
        logger.error("World generation failed", seed=seed, error=str(e))
        raise HTTPException(status_code=422, detail=f"World generation failed: {e}")

    elapsed = time.perf_counter() - clock
    world_id = str(uuid.uuid4())
    _worlds[world_id] = StoredWorld(
        id=world_id,
        created_at=started,
        generation_time_seconds=elapsed,
        result=result,
    )
    while len(_worlds) > settings.max_stored_worlds:
        _worlds.popitem(last=False)

    logger.info("World stored", world_id=world_id, seconds=elapsed)
    return _summary(_worlds[world_id])


@app.get("/worlds", response_model=List[WorldSummary])
async def list_worlds():
    """List generated worlds, newest first."""
    return [_summary(stored) for stored in reversed(_worlds.values())]


@app.get("/worlds/{world_id}", response_model=WorldSummary)
async def get_world(world_id: str):
    """Get world details."""
    return _summary(_get_world(world_id))


@app.get("/worlds/{world_id}/cities", response_model=List[CityInfo])
async def get_cities(world_id: str, owned_only: bool = False):
    """List placed cities, optionally only those with an owner."""
    result = _get_world(world_id).result
    world = result.world
    cities = []
    for city in result.cities:
        if not city.placed or (owned_only and city.owner == Owner.UNOWNED):
            continue
        row, col = world.row_col(city.loc)
        cities.append(
            CityInfo(
                id=city.id,
                loc=city.loc,
                row=row,
                col=col,
                owner=city.owner.name,
                prod=city.prod.name if city.prod is not None else None,
                work=city.work,
                shore=world.is_shore(city.loc),
            )
        )
    return cities


@app.get("/worlds/{world_id}/continents", response_model=List[ContinentInfo])
async def get_continents(world_id: str):
    """List ranked continents, best first."""
    result = _get_world(world_id).result
    return [
        ContinentInfo(
            rank=rank,
            value=continent.value,
            city_count=continent.city_count,
            shore_count=continent.shore_count,
            land_count=continent.land_count,
            city_ids=[city.id for city in continent.cities],
        )
        for rank, continent in enumerate(result.continents)
    ]


@app.get("/worlds/{world_id}/map", response_class=PlainTextResponse)
async def get_text_map(world_id: str, show_cities: bool = True):
    """The world as text: '+' land, '.' sea, 'o' city."""
    return _get_world(world_id).result.world.to_text(show_cities=show_cities)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
