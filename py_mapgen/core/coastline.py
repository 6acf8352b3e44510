"""Sea level and coastline clean-up."""

import numpy as np
import structlog

from .errors import EmptyFieldError
from .heightfield import HeightField

logger = structlog.get_logger()


def quantile(field: HeightField, q: float) -> float:
    """Linear-interpolated q-quantile of the field's heights."""
    if len(field) == 0:
        raise EmptyFieldError("Cannot take a quantile of an empty field")
    if not 0 <= q <= 1:
        raise ValueError(f"Quantile must be in [0, 1], got {q}")
    return float(np.quantile(np.sort(field.values), q))


def set_sea_level(field: HeightField, q: float) -> HeightField:
    """Shift heights so that a fraction ``q`` of the cells lies at or below 0."""
    delta = quantile(field, q)
    logger.debug("Setting sea level", quantile=q, offset=delta)
    return field.with_values(field.values - delta)


def _smooth_pass(field: HeightField, land: bool):
    """
    One coast smoothing pass.

    With ``land`` set, a degree-3 land cell with at most one land neighbor
    sinks to half the height of its highest sea neighbor. Otherwise a
    degree-3 sea cell with at most one sea neighbor rises to half the height
    of its lowest land neighbor. Either way the cell crosses the coastline.
    """
    topo = field.topology
    vals = field.values
    out = vals.copy()
    changed = 0
    for i in range(topo.n_cells):
        nbs = topo.neighbors(i)
        if len(nbs) != 3 or (vals[i] > 0) != land:
            continue
        other = [vals[j] for j in nbs if (vals[j] > 0) != land]
        if len(nbs) - len(other) > 1:
            continue
        out[i] = (max(other) if land else min(other)) / 2
        changed += 1
    return field.with_values(out), changed


def clean_coast(field: HeightField, iterations: int) -> HeightField:
    """Remove single-cell spurs and inlets along the coast."""
    for _ in range(iterations):
        field, lowered = _smooth_pass(field, land=True)
        field, raised = _smooth_pass(field, land=False)
        logger.debug("Coast pass", lowered=lowered, raised=raised)
    return field
