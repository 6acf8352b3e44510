"""Grid-based terrain, hydrology and territory generation."""

__version__ = "0.1.0"
