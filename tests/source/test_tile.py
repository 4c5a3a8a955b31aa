"""Tests for the Zoomify tile grid and tile URLs."""

import pytest

from maplat.source.tile import MaplatSource, TileGrid, pixel_extent, world_extent_size

pytestmark = pytest.mark.unit


class TestTileGrid:

    def test_tiers_halve_until_one_tile(self):
        grid = TileGrid.zoomify((1000, 600))

        assert grid.tier_sizes == ((1, 1), (2, 2), (4, 3))
        assert grid.resolutions == (4, 2, 1)
        assert grid.max_zoom == 2
        assert grid.tile_count(2) == 12

    def test_small_image_is_a_single_tier(self):
        grid = TileGrid.zoomify((200, 100))
        assert grid.tier_sizes == ((1, 1),)
        assert grid.resolutions == (1,)

    def test_tile_pixel_ratio_scales_tiers_and_resolutions(self):
        grid = TileGrid.zoomify((1000, 600), tile_pixel_ratio=2)
        assert grid.tier_sizes == ((1, 1), (2, 2))
        assert grid.resolutions == (4, 2)

    def test_default_extent_is_fourth_quadrant(self):
        assert TileGrid.zoomify((1000, 600)).extent == (0.0, -600.0, 1000.0, 0.0)

    def test_explicit_extent_is_kept(self):
        grid = TileGrid.zoomify((1000, 600), extent=(0, 0, 1000, 600))
        assert grid.extent == (0, 0, 1000, 600)


class TestExtents:

    def test_pixel_extent(self):
        assert pixel_extent((1000, 600)) == (0.0, -600.0, 1000.0, 0.0)

    @pytest.mark.parametrize("size,expected", [
        ((1000, 600), 1024.0),
        ((256, 256), 256.0),
        ((257, 10), 512.0),
        ((5000, 8000), 8192.0),
    ])
    def test_world_extent_size_is_next_power_of_two_pyramid(self, size, expected):
        assert world_extent_size(size) == expected


def test_tile_url_substitutes_placeholders():
    source = MaplatSource(map_id="demo", url="https://t.example.com/{z}/{x}/{y}.jpg",
                          projection=None, strategy=None)
    assert source.tile_url(3, 5, 7) == "https://t.example.com/3/5/7.jpg"
