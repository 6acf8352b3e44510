"""
End-to-end map generation.

Runs the coast heightmap recipe and then derives cities, territories and
the river, coast and border paths handed to the renderer.
"""

from dataclasses import dataclass, field as dataclass_field
from typing import List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, model_validator

from ..config import settings
from .alea_prng import AleaPRNG
from .coastline import clean_coast, set_sea_level
from .erosion import do_erosion
from .field_ops import add, cone, mountains, peaky, random_peaks, relax, slope
from .heightfield import HeightField
from .paths import Path, contour, get_rivers
from .territories import get_borders, get_territories, place_cities
from .topology import Extent, Topology

logger = structlog.get_logger()


class GenerationOptions(BaseModel):
    """Map generation options."""

    width: int = Field(default=settings.default_map_width, ge=1, le=settings.max_map_width,
                       description="Grid width in cells")
    height: int = Field(default=settings.default_map_height, ge=1, le=settings.max_map_height,
                        description="Grid height in cells")
    seed: str = Field(default=settings.default_seed, description="Seed for the random source")

    ncities: int = Field(default=15, ge=0, description="Number of cities to place")
    nterrs: int = Field(default=5, ge=1, description="Number of cities that found a territory")

    # Heightmap recipe
    slope_scale: float = Field(default=4.0, description="Std. deviation of the tilt vector")
    cone_slope: float = Field(default=-1.0, description="Radial slope, negative sinks the rim")
    mountain_count: int = Field(default=50, ge=0, description="Number of mountain bumps")
    relax_iterations: int = Field(default=10, ge=0, description="Smoothing passes")
    erosion_iterations: int = Field(default=5, ge=0, description="Erode/refill cycles")
    erosion_amount_range: Tuple[float, float] = Field(
        default=(0.0, 0.1), description="Range the erosion amount is drawn from"
    )
    sea_level_range: Tuple[float, float] = Field(
        default=(0.2, 0.6), description="Range the sea level quantile is drawn from"
    )
    coast_iterations: int = Field(default=3, ge=0, description="Coast clean-up passes")

    # Paths
    river_limit: float = Field(default=0.01, gt=0, description="Flux needed to draw a river")

    @model_validator(mode="after")
    def _check_ranges(self):
        lo, hi = self.sea_level_range
        if not 0 <= lo <= hi <= 1:
            raise ValueError(f"sea_level_range must lie within [0, 1], got {self.sea_level_range}")
        lo, hi = self.erosion_amount_range
        if lo > hi:
            raise ValueError(f"erosion_amount_range is inverted: {self.erosion_amount_range}")
        return self


@dataclass
class MapResult:
    """Everything the renderer needs from one generation run."""
    heights: HeightField
    cities: List[int]
    nterrs: int
    territories: np.ndarray
    rivers: List[Path] = dataclass_field(default_factory=list)
    coasts: List[Path] = dataclass_field(default_factory=list)
    borders: List[Path] = dataclass_field(default_factory=list)


def generate_coast(topology: Topology, rng: AleaPRNG, options: Optional[GenerationOptions] = None) -> HeightField:
    """
    Build a coastal heightmap.

    A random tilt, a sunken rim and scattered mountains are summed, smoothed,
    sharpened, eroded and cut at a random sea level. Slope and cone
    coefficients are divided by the grid size so the recipe does not depend
    on resolution.
    """
    options = options or GenerationOptions(width=topology.width, height=topology.height)
    scale = max(topology.width, topology.height)

    tilt_x, tilt_y = rng.random_vector(options.slope_scale)
    peaks = random_peaks(topology, options.mountain_count, rng)
    h = add(
        slope(topology, (tilt_x / scale, tilt_y / scale)),
        cone(topology, options.cone_slope / scale),
        mountains(topology, peaks),
    )
    h = relax(h, options.relax_iterations)
    h = peaky(h)

    amount = rng.uniform(*options.erosion_amount_range)
    if options.erosion_iterations:
        h = do_erosion(h, amount, options.erosion_iterations, epsilon=settings.fill_epsilon)

    sea_level = rng.uniform(*options.sea_level_range)
    h = set_sea_level(h, sea_level)
    h = clean_coast(h, options.coast_iterations)

    logger.info("Coast generated", erosion_amount=amount, sea_level=sea_level,
                land_cells=h.land_count(), cells=len(h), random_draws=rng.call_count)
    return h


class MapGenerator:
    """Runs the full pipeline for one set of options."""

    def __init__(self, options: Optional[GenerationOptions] = None, rng: Optional[AleaPRNG] = None):
        """
        Initialize the generator.

        Args:
            options: Generation options, defaults to GenerationOptions()
            rng: Random source, defaults to a new AleaPRNG seeded with options.seed
        """
        self.options = options or GenerationOptions()
        self.rng = rng or AleaPRNG(self.options.seed)
        self.topology = Topology(Extent(self.options.width, self.options.height),
                                 settings.near_boundary_margin)

    def generate(self) -> MapResult:
        logger.info("Starting map generation", width=self.options.width,
                    height=self.options.height, seed=self.options.seed)

        heights = generate_coast(self.topology, self.rng, self.options)
        return self.derive(heights)

    def derive(self, heights: HeightField) -> MapResult:
        """Place cities and extract territories and paths for given heights."""
        cities = place_cities(heights, self.options.ncities)
        nterrs = min(self.options.nterrs, len(cities))

        rivers = get_rivers(heights, self.options.river_limit)
        coasts = contour(heights, 0)

        if nterrs:
            territories = get_territories(heights, cities, nterrs)
            borders = get_borders(heights, territories)
        else:
            logger.warning("No cities placed, skipping territories")
            territories = np.full(len(heights), -1, dtype=np.int64)
            borders = []

        logger.info("Map generation completed", cities=len(cities), rivers=len(rivers),
                    coasts=len(coasts), borders=len(borders))
        return MapResult(
            heights=heights,
            cities=cities,
            nterrs=nterrs,
            territories=territories,
            rivers=rivers,
            coasts=coasts,
            borders=borders,
        )


def generate_map(options: Optional[GenerationOptions] = None, rng: Optional[AleaPRNG] = None) -> MapResult:
    return MapGenerator(options, rng).generate()
