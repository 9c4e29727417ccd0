"""
Raster to pygame Surface adapter tests.
"""

import os

import pygame
import pytest

from copperview.core import Screen, decode_raster
from copperview.shell.surface import raster_to_surface, save_png


@pytest.fixture
def raster(frame):
    """16x2 raster: pixel (0, 0) red, everything else transparent (masked)."""
    frame.put_word(0x100, 0x8000)
    frame.put_word(0x300, 0x8000)
    screen = Screen(16, 2, (0x100,), (-2, -2))
    mask = Screen(16, 2, (0x300,), (0, 0))
    return decode_raster(screen, mask, [0x000000, 0xFF0000], frame.memory())


class TestRasterToSurface:

    def test_size(self, raster):
        assert raster_to_surface(raster).get_size() == (16, 2)

    def test_scaled_size(self, raster):
        assert raster_to_surface(raster, scale=3).get_size() == (48, 6)

    def test_scale_clamped(self, raster):
        assert raster_to_surface(raster, scale=20).get_size() == (128, 16)

    def test_pixels_and_alpha(self, raster):
        surface = raster_to_surface(raster)
        assert tuple(surface.get_at((0, 0))) == (0xFF, 0x00, 0x00, 0xFF)
        assert surface.get_at((1, 0)).a == 0

    def test_scaled_block(self, raster):
        """Each source pixel fills a scale x scale block."""
        surface = raster_to_surface(raster, scale=2)
        for x, y in [(0, 0), (1, 0), (0, 1), (1, 1)]:
            assert tuple(surface.get_at((x, y)))[:3] == (0xFF, 0x00, 0x00)
        assert surface.get_at((2, 0)).a == 0

    def test_background_fill(self, raster):
        surface = raster_to_surface(raster, background=0x00FF00)
        assert tuple(surface.get_at((1, 1)))[:3] == (0x00, 0xFF, 0x00)
        assert tuple(surface.get_at((0, 0)))[:3] == (0xFF, 0x00, 0x00)


class TestSavePng:

    def test_writes_file(self, raster, tmp_path):
        path = str(tmp_path / "out.png")
        save_png(raster, path, scale=2)
        assert os.path.getsize(path) > 0
        assert pygame.image.load(path).get_size() == (32, 4)
