"""Zoomify tile grid and the Maplat tile source."""

import math
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from maplat.projection.registry import ProjectionEntry
    from maplat.source.strategy import Strategy

__all__ = ['TileGrid', 'MaplatSource', 'pixel_extent', 'world_extent_size']

Size = tuple[int, int]
Extent = tuple[float, float, float, float]


def pixel_extent(size: Size) -> Extent:
    """Image extent in the fourth quadrant: ``[0, -height, width, 0]``."""
    return (0.0, -float(size[1]), float(size[0]), 0.0)


def world_extent_size(size: Size, tile_size: int = 256) -> float:
    """Edge length of the power-of-two tile pyramid covering the image."""
    max_zoom = math.ceil(max(math.log2(size[0] / tile_size), math.log2(size[1] / tile_size)))
    return tile_size * math.pow(2, max_zoom)


@dataclass(frozen=True)
class TileGrid:
    """Tile pyramid of one image.

    ``resolutions[z]`` is the number of image pixels per tile pixel at zoom
    ``z`` (largest first), ``tier_sizes[z]`` the ``(columns, rows)`` count.
    """
    tile_size: int
    extent: Extent
    resolutions: tuple[int, ...]
    tier_sizes: tuple[tuple[int, int], ...]

    @classmethod
    def zoomify(cls, size: Size, tile_size: int = 256, tile_pixel_ratio: int = 1,
                extent: Optional[Extent] = None) -> "TileGrid":
        """Build the grid by halving the image until it fits one tile.

        Examples
        --------
        >>> grid = TileGrid.zoomify((1000, 600))
        >>> grid.tier_sizes
        ((1, 1), (2, 2), (4, 3))
        >>> grid.resolutions
        (4, 2, 1)
        """
        tier_tile = tile_size * tile_pixel_ratio
        width, height = int(size[0]), int(size[1])

        tiers = []
        while width > tier_tile or height > tier_tile:
            tiers.append((math.ceil(width / tier_tile), math.ceil(height / tier_tile)))
            width >>= 1
            height >>= 1
        tiers.append((1, 1))
        tiers.reverse()

        resolutions = [tile_pixel_ratio << i for i in range(len(tiers))]
        resolutions.reverse()

        return cls(
            tile_size=tile_size,
            extent=extent or pixel_extent(size),
            resolutions=tuple(resolutions),
            tier_sizes=tuple(tiers),
        )

    @property
    def max_zoom(self) -> int:
        return len(self.resolutions) - 1

    def tile_count(self, z: int) -> int:
        columns, rows = self.tier_sizes[z]
        return columns * rows


@dataclass(frozen=True)
class MaplatSource:
    """A tile source configured with its projection.

    Attributes
    ----------
    map_id : str
        Map ID (``<parent>#<n>`` for sub maps).
    url : str
        Tile URL template with ``{z}``, ``{x}``, ``{y}`` placeholders.
    projection : ProjectionEntry
        Registered projection (the reference entry for pass-through maps).
    strategy : Strategy
        Decided projection strategy.
    size : tuple of int, optional
        Image size; None for reference-aligned tile services.
    tile_grid : TileGrid, optional
        Zoomify grid of pixel projections.
    title : optional
        Descriptor title, kept verbatim (may be a locale dict).
    """
    map_id: str
    url: str
    projection: "ProjectionEntry"
    strategy: "Strategy"
    size: Optional[Size] = None
    tile_grid: Optional[TileGrid] = None
    title: Optional[object] = None

    @property
    def code(self) -> str:
        return self.projection.code

    def tile_url(self, z: int, x: int, y: int) -> str:
        return (self.url
                .replace("{z}", str(z))
                .replace("{x}", str(x))
                .replace("{y}", str(y)))
