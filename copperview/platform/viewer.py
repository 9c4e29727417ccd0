"""
Interactive bitmap viewer for copperview.
Uses pygame to show one bitmap of a :class:`DebugSession` decoded with a
selectable palette.

Keys:

    Left / Right   previous / next bitmap
    Up / Down      previous / next palette
    + / -          zoom in / out
    Mouse          show position, colour index and mask under the pointer
    Escape         quit

Typical usage::

    from copperview.platform.viewer import Viewer

    viewer = Viewer(session, scale=2)
    viewer.run()
"""

from __future__ import annotations

import logging
from typing import Optional

import pygame

from copperview.core.raster import read_pixel
from copperview.shell.catalog import describe_view
from copperview.shell.session import DebugSession
from copperview.shell.surface import raster_to_surface

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "copperview"

_MIN_SCALE: int = 1
_MAX_SCALE: int = 8

# Checkerboard tones shown through transparent pixels.
_CHECKER_LIGHT = (0x60, 0x60, 0x60)
_CHECKER_DARK = (0x40, 0x40, 0x40)
_CHECKER_SIZE = 8

_FPS: int = 30


class Viewer:
    """Pygame window browsing the bitmaps and palettes of a session.

    Parameters
    ----------
    session:
        The session to display.
    scale:
        Integer zoom applied to the bitmap.
    bitmap:
        Name of the initially selected bitmap (first one if ``None``).
    palette:
        Name of the initially selected palette (first one if ``None``).
    """

    def __init__(
        self,
        session: DebugSession,
        scale: int = 2,
        *,
        bitmap: Optional[str] = None,
        palette: Optional[str] = None,
    ) -> None:
        self._session = session
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._running: bool = False

        self._bitmaps = session.bitmap_views()
        self._palettes = session.palette_views()
        self._bitmap_index: int = self._bitmaps.index(DebugSession.find(self._bitmaps, bitmap))
        self._palette_index: int = self._palettes.index(DebugSession.find(self._palettes, palette))

        if not pygame.get_init():
            pygame.init()

        self._screen: pygame.Surface = pygame.display.set_mode(self._window_size(), pygame.RESIZABLE)
        self._clock: pygame.time.Clock = pygame.time.Clock()
        self._dirty: bool = True
        self._pointer: Optional[tuple[int, int]] = None

        logger.info(
            "Viewer: %d bitmaps, %d palettes (scale=%d)",
            len(self._bitmaps), len(self._palettes), self._scale,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def bitmap(self):
        return self._bitmaps[self._bitmap_index]

    @property
    def palette(self):
        return self._palettes[self._palette_index]

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Show the window until it is closed or Escape is pressed."""
        self._running = True
        try:
            while self._running:
                self._tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            logger.info("Shutting down")
            pygame.quit()

    def _tick(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)
            elif event.type == pygame.MOUSEMOTION:
                self.handle_motion(event.pos)
            elif event.type == pygame.WINDOWLEAVE:
                self._pointer = None
                self._dirty = True
            elif event.type == pygame.VIDEORESIZE:
                self._dirty = True

        if self._running and self._dirty:
            self._draw()
            self._dirty = False
        self._clock.tick(_FPS)

    def handle_key(self, key: int) -> None:
        """Apply one key press to the selection state."""
        if key == pygame.K_ESCAPE:
            self._running = False
        elif key == pygame.K_RIGHT:
            self._bitmap_index = (self._bitmap_index + 1) % len(self._bitmaps)
        elif key == pygame.K_LEFT:
            self._bitmap_index = (self._bitmap_index - 1) % len(self._bitmaps)
        elif key == pygame.K_DOWN:
            self._palette_index = (self._palette_index + 1) % len(self._palettes)
        elif key == pygame.K_UP:
            self._palette_index = (self._palette_index - 1) % len(self._palettes)
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self._scale = min(_MAX_SCALE, self._scale + 1)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self._scale = max(_MIN_SCALE, self._scale - 1)
        else:
            return
        self._dirty = True

    def handle_motion(self, pos: tuple[int, int]) -> None:
        """Track the bitmap pixel under window position *pos*."""
        self._pointer = (pos[0] // self._scale, pos[1] // self._scale)
        self._dirty = True

    def pixel_info(self) -> Optional[str]:
        """Position, colour index and mask value of the pixel under the pointer."""
        if self._pointer is None:
            return None
        x, y = self._pointer
        screen = self.bitmap.screen
        if not (0 <= x < screen.width and 0 <= y < screen.height):
            return None

        memory = self._session.memory
        color = read_pixel(screen, memory, x, y)
        info = f"X:{x} Y:{y}  Colour {_format_value(color, screen.num_planes)}"
        mask = self.bitmap.mask
        if mask is not None:
            info += f"  Mask {_format_value(read_pixel(mask, memory, x, y), mask.num_planes)}"
        return info

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _window_size(self) -> tuple[int, int]:
        screen = self.bitmap.screen
        return (max(1, screen.width * self._scale), max(1, screen.height * self._scale))

    def _draw(self) -> None:
        raster = self._session.render(self.bitmap, self.palette.palette)
        surface = raster_to_surface(raster, self._scale)

        if self._screen.get_size() != surface.get_size():
            self._screen = pygame.display.set_mode(surface.get_size(), pygame.RESIZABLE)

        self._draw_checkerboard()
        self._screen.blit(surface, (0, 0))
        pygame.display.set_caption(self._build_title())
        pygame.display.flip()

    def _draw_checkerboard(self) -> None:
        width, height = self._screen.get_size()
        self._screen.fill(_CHECKER_DARK)
        for y in range(0, height, _CHECKER_SIZE):
            for x in range(0, width, _CHECKER_SIZE):
                if (x // _CHECKER_SIZE + y // _CHECKER_SIZE) & 1:
                    self._screen.fill(_CHECKER_LIGHT, (x, y, _CHECKER_SIZE, _CHECKER_SIZE))

    def _build_title(self) -> str:
        title = (
            f"{_WINDOW_TITLE}  {describe_view(self.bitmap)}  |  "
            f"{describe_view(self.palette)}  (x{self._scale})"
        )
        info = self.pixel_info()
        if info is not None:
            title += f"  |  {info}"
        return title


def _format_value(value: int, planes: int) -> str:
    """``5 $05 %101`` with the binary form padded to *planes* digits."""
    return f"{value} ${value:02x} %{value:0{max(planes, 1)}b}"
