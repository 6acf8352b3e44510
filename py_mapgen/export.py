"""
JSON records for handing generated maps to a renderer.

Heights are stored row-major as a flat list; paths as lists of [x, y] pairs.
"""

from typing import List, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, model_validator

from .core.generator import MapResult
from .core.heightfield import HeightField
from .core.topology import Extent, Topology

logger = structlog.get_logger()

PathRecord = List[Tuple[float, float]]


class HeightFieldRecord(BaseModel):
    """Serialized height field."""

    width: int = Field(ge=1, description="Grid width in cells")
    height: int = Field(ge=1, description="Grid height in cells")
    heights: List[float] = Field(description="Heights indexed by y * width + x")

    @model_validator(mode="after")
    def _check_size(self):
        if len(self.heights) != self.width * self.height:
            raise ValueError(
                f"Expected {self.width * self.height} heights, got {len(self.heights)}"
            )
        return self

    @classmethod
    def from_field(cls, field: HeightField) -> "HeightFieldRecord":
        return cls(width=field.topology.width, height=field.topology.height,
                   heights=field.values.tolist())

    def to_field(self) -> HeightField:
        return HeightField(Topology(Extent(self.width, self.height)), self.heights)


class MapRecord(BaseModel):
    """Serialized map generation result."""

    heights: HeightFieldRecord
    cities: List[int] = Field(default_factory=list, description="City cell indices, capitals first")
    nterrs: int = Field(default=0, ge=0, description="Number of leading cities that own territories")
    territories: List[int] = Field(default_factory=list, description="Owning city index per cell")
    rivers: List[PathRecord] = Field(default_factory=list)
    coasts: List[PathRecord] = Field(default_factory=list)
    borders: List[PathRecord] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: MapResult) -> "MapRecord":
        return cls(
            heights=HeightFieldRecord.from_field(result.heights),
            cities=[int(c) for c in result.cities],
            nterrs=result.nterrs,
            territories=np.asarray(result.territories).tolist(),
            rivers=result.rivers,
            coasts=result.coasts,
            borders=result.borders,
        )

    def to_result(self) -> MapResult:
        return MapResult(
            heights=self.heights.to_field(),
            cities=list(self.cities),
            nterrs=self.nterrs,
            territories=np.asarray(self.territories, dtype=np.int64),
            rivers=[list(p) for p in self.rivers],
            coasts=[list(p) for p in self.coasts],
            borders=[list(p) for p in self.borders],
        )


def map_to_json(result: MapResult, indent=None) -> str:
    record = MapRecord.from_result(result)
    logger.debug("Serializing map", cells=len(record.heights.heights),
                 paths=len(record.rivers) + len(record.coasts) + len(record.borders))
    return record.model_dump_json(indent=indent)


def map_from_json(text: str) -> MapResult:
    return MapRecord.model_validate_json(text).to_result()
