"""Fluvial and creep erosion on top of the hydrology model."""

import numpy as np
import structlog

from .heightfield import HeightField
from .hydrology import DEFAULT_FILL_EPSILON, fill_sinks, get_flux, get_slope

logger = structlog.get_logger()

RIVER_WEIGHT = 1000.0
MAX_EROSION_RATE = 200.0


def erosion_rate(field: HeightField) -> np.ndarray:
    """Per-cell erosion: river cutting (sqrt(flux) * slope) plus creep (slope^2), capped."""
    flux = get_flux(field)
    slope = get_slope(field)
    river = np.sqrt(flux) * slope
    creep = slope * slope
    return np.minimum(RIVER_WEIGHT * river + creep, MAX_EROSION_RATE)


def erode(field: HeightField, amount: float) -> HeightField:
    """Lower every cell in proportion to its erosion rate; the fastest loses ``amount``."""
    rate = erosion_rate(field)
    max_rate = rate.max()
    if max_rate <= 0:
        logger.debug("Nothing to erode, field is flat")
        return field.with_values(field.values)
    return field.with_values(field.values - amount * (rate / max_rate))


def do_erosion(
    field: HeightField,
    amount: float,
    iterations: int = 1,
    epsilon: float = DEFAULT_FILL_EPSILON,
) -> HeightField:
    """
    Run the erode/refill loop.

    Depressions are filled before the first step and again after every
    erosion step.
    """
    logger.info("Eroding terrain", amount=amount, iterations=iterations)
    field = fill_sinks(field, epsilon)
    for _ in range(iterations):
        field = erode(field, amount)
        field = fill_sinks(field, epsilon)
    return field
