#!/usr/bin/env python3
"""
Demo script generating a small map and printing a text preview.
"""

import sys

import numpy as np
from py_mapgen.core import GenerationOptions, MapGenerator
from py_mapgen.export import map_to_json
from py_mapgen.logging_config import configure_logging


def render(result):
    """ASCII view: ~ sea, . lowland, ^ highland, digits for capitals."""
    heights = result.heights
    topo = heights.topology
    high = np.quantile(heights.values[heights.land_mask()], 0.75) if heights.land_count() else 0
    capitals = {c: str(k) for k, c in enumerate(result.cities[:result.nterrs])}
    lines = []
    for y in range(topo.height):
        row = []
        for x in range(topo.width):
            i = topo.index_of(x, y)
            if i in capitals:
                row.append(capitals[i])
            elif i in result.cities:
                row.append("o")
            elif not heights.is_land(i):
                row.append("~")
            elif heights.values[i] > high:
                row.append("^")
            else:
                row.append(".")
        lines.append("".join(row))
    return "\n".join(lines)


def main():
    """Demonstrate map generation."""
    configure_logging("warning", "plain")
    seed = sys.argv[1] if len(sys.argv) > 1 else "demo123"

    print("Map Generation Demo")
    print("=" * 40)

    options = GenerationOptions(width=60, height=40, seed=seed, ncities=8, nterrs=3)
    result = MapGenerator(options).generate()

    heights = result.heights
    land_pct = heights.land_count() / len(heights) * 100
    print(f"  Seed: {seed}")
    print(f"  Cells: {len(heights)}")
    print(f"  Land: {heights.land_count()} ({land_pct:.1f}%)")
    print(f"  Cities: {len(result.cities)} ({result.nterrs} capitals)")
    print(f"  Rivers: {len(result.rivers)}")
    print(f"  Coastlines: {len(result.coasts)}")
    print(f"  Borders: {len(result.borders)}")
    print()
    print(render(result))

    if len(sys.argv) > 2:
        with open(sys.argv[2], "w") as f:
            f.write(map_to_json(result, indent=2))
        print(f"\nSaved map to {sys.argv[2]}")


if __name__ == "__main__":
    main()
