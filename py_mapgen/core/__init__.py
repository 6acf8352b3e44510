"""
Core grid terrain and territory generation.
"""

from .alea_prng import AleaPRNG
from .topology import Direction, Extent, GridPoint, Topology, NEAR_BOUNDARY_MARGIN
from .heightfield import HeightField, build
from .hydrology import DownhillInfo, SinkKind, SinkResult, downhill, find_sinks, fill_sinks, get_flux, get_slope
from .erosion import erosion_rate, erode, do_erosion
from .coastline import quantile, set_sea_level, clean_coast
from .paths import merge_segments, relax_path, contour, get_rivers
from .territories import city_score, place_city, place_cities, get_territories, get_borders, territory_center
from .generator import GenerationOptions, MapGenerator, MapResult, generate_coast, generate_map

__all__ = ['AleaPRNG', 'Direction', 'Extent', 'GridPoint', 'Topology', 'NEAR_BOUNDARY_MARGIN',
           'HeightField', 'build',
           'DownhillInfo', 'SinkKind', 'SinkResult', 'downhill', 'find_sinks', 'fill_sinks',
           'get_flux', 'get_slope',
           'erosion_rate', 'erode', 'do_erosion',
           'quantile', 'set_sea_level', 'clean_coast',
           'merge_segments', 'relax_path', 'contour', 'get_rivers',
           'city_score', 'place_city', 'place_cities', 'get_territories', 'get_borders',
           'territory_center',
           'GenerationOptions', 'MapGenerator', 'MapResult', 'generate_coast', 'generate_map']
