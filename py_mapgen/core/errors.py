"""Exception types raised by the grid engine."""


class MapGenError(Exception):
    """Base class for map generation errors."""


class InvalidExtentError(MapGenError, ValueError):
    """Raised when a grid is requested with a non-positive width or height."""

    def __init__(self, width, height):
        super().__init__(f"Extent must be positive, got width={width} height={height}")
        self.width = width
        self.height = height


class TopologyMismatchError(MapGenError, ValueError):
    """Raised when fields over different topologies are combined."""


class FieldShapeError(MapGenError, ValueError):
    """Raised when a value array does not match the topology's cell count."""


class EmptyFieldError(MapGenError, ValueError):
    """Raised when a statistic is requested over no values."""


class NoCitiesError(MapGenError, ValueError):
    """Raised when territories are requested without any city to grow from."""
