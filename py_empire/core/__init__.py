"""
Core world generation functionality.
"""

from .alea_prng import AleaPRNG
from .grid import GridConfig, Terrain, WorldCell, WorldMap
from .heightmap_generator import HeightmapGenerator, MAX_HEIGHT
from .terrain import classify_terrain, make_box_map
from .cities import City, CityPlacer, Owner, UnitType
from .continents import ContinentAnalyzer, ContinentRecord
from .pairing import RankedPair, rank_pairs
from .start_assignment import StartAssignor, ViewMap
from .world_generator import GeneratedWorld, GenerationOptions, WorldGenerator, generate_world

__all__ = ['AleaPRNG', 'GridConfig', 'Terrain', 'WorldCell', 'WorldMap',
           'HeightmapGenerator', 'MAX_HEIGHT', 'classify_terrain', 'make_box_map',
           'City', 'CityPlacer', 'Owner', 'UnitType',
           'ContinentAnalyzer', 'ContinentRecord', 'RankedPair', 'rank_pairs',
           'StartAssignor', 'ViewMap',
           'GeneratedWorld', 'GenerationOptions', 'WorldGenerator', 'generate_world']
