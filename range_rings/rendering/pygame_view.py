"""
Pygame renderer for the retained scene graph.

Draws every visible line strip and text label of a RetainedSceneGraph in a
top-down orthographic view of the scene root's XY plane (+x right, +y up).
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
import pygame

from range_rings.core.labels import HAlign, VAlign
from range_rings.rendering.retained import RetainedSceneGraph

logger = logging.getLogger(__name__)


class PygameRenderer:
    """Windowed pygame renderer."""

    def __init__(self):
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.width: int = 0
        self.height: int = 0
        self._fonts: dict = {}

    # ── Lifecycle ──────────────────────────────────────────────

    def init(self, size: Tuple[int, int] = (1280, 800),
             caption: str = "Range Rings") -> None:
        pygame.init()
        self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        pygame.display.set_caption(caption)
        self.clock = pygame.time.Clock()
        self.width, self.height = self.screen.get_size()
        logger.info(f"Display initialized: {self.width}x{self.height}")

    def get_size(self) -> Tuple[int, int]:
        if self.screen:
            self.width, self.height = self.screen.get_size()
        return (self.width, self.height)

    def clear(self, color: Tuple[int, int, int]) -> None:
        if self.screen:
            self.screen.fill(color)

    def flip(self) -> None:
        pygame.display.flip()

    def tick(self, fps: int) -> float:
        """Tick clock and return time since last tick in seconds."""
        if self.clock:
            return self.clock.tick(fps) / 1000.0
        return 0.0

    def get_events(self) -> List:
        return pygame.event.get()

    def quit(self) -> None:
        pygame.quit()

    # ── Primitives ─────────────────────────────────────────────

    def draw_lines(self, points: List[Tuple[int, int]],
                   color: Tuple[int, ...], width: int = 1,
                   closed: bool = False) -> None:
        """Draw connected line segments. alpha < 255 uses a temp surface."""
        if not self.screen or len(points) < 2:
            return
        alpha = color[3] if len(color) >= 4 else 255
        if alpha == 0:
            return
        if alpha >= 255:
            pygame.draw.lines(self.screen, color[:3], closed, points, width)
            return

        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        min_x = min(xs) - width
        min_y = min(ys) - width
        surf_width = max(1, max(xs) + width - min_x + 2)
        surf_height = max(1, max(ys) + width - min_y + 2)

        temp_surface = pygame.Surface((surf_width, surf_height), pygame.SRCALPHA)
        local_points = [(p[0] - min_x + 1, p[1] - min_y + 1) for p in points]
        pygame.draw.lines(temp_surface, (*color[:3], alpha), closed, local_points, width)
        self.screen.blit(temp_surface, (min_x - 1, min_y - 1))

    def draw_text(self, text: str, position: Tuple[int, int],
                  color: Tuple[int, ...], font_size: int = 24,
                  h_align: HAlign = HAlign.LEFT,
                  v_align: VAlign = VAlign.CENTER) -> None:
        """Draw text with its aligned edge at position."""
        if not self.screen or font_size <= 0:
            return

        if font_size not in self._fonts:
            self._fonts[font_size] = pygame.font.Font(None, font_size)
        text_surface = self._fonts[font_size].render(text, True, color[:3])
        if len(color) >= 4 and color[3] < 255:
            text_surface.set_alpha(color[3])

        rect = text_surface.get_rect()
        if h_align is HAlign.LEFT:
            rect.left = position[0]
        elif h_align is HAlign.RIGHT:
            rect.right = position[0]
        else:
            rect.centerx = position[0]
        if v_align is VAlign.TOP:
            rect.top = position[1]
        elif v_align is VAlign.BOTTOM:
            rect.bottom = position[1]
        else:
            rect.centery = position[1]
        self.screen.blit(text_surface, rect)


class SceneView:
    """
    Orthographic top-down camera over the scene root.

    Args:
        pixels_per_meter: Zoom factor
        center: World point (x, y) shown at the window center
    """

    def __init__(self, pixels_per_meter: float = 2.0,
                 center: Tuple[float, float] = (0.0, 0.0)):
        self.pixels_per_meter = pixels_per_meter
        self.center = center

    def world_to_screen(self, points: np.ndarray,
                        screen_size: Tuple[int, int]) -> List[Tuple[int, int]]:
        """Convert an (N, 3) array of world points to screen pixels."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        sx = screen_size[0] / 2.0 + (pts[:, 0] - self.center[0]) * self.pixels_per_meter
        sy = screen_size[1] / 2.0 - (pts[:, 1] - self.center[1]) * self.pixels_per_meter
        return [(int(round(x)), int(round(y))) for x, y in zip(sx, sy)]

    def zoom(self, factor: float) -> None:
        self.pixels_per_meter = max(0.01, self.pixels_per_meter * factor)

    def draw(self, renderer: PygameRenderer, graph: RetainedSceneGraph) -> None:
        """Draw every visible renderable of the graph."""
        size = renderer.get_size()

        for strip in graph.line_strips():
            if not graph.is_visible(strip.handle):
                continue
            points = self.world_to_screen(graph.world_points(strip.handle), size)
            width = max(1, int(round(strip.width * self.pixels_per_meter)))
            renderer.draw_lines(points, strip.colors[0] if strip.colors else (255, 255, 255, 255),
                                width=width)

        for label in graph.text_labels():
            if not graph.is_visible(label.handle):
                continue
            anchor = self.world_to_screen(np.array([graph.world_anchor(label.handle)]), size)[0]
            font_size = int(round(label.height * self.pixels_per_meter))
            renderer.draw_text(label.text, anchor, label.color, font_size,
                               label.h_align, label.v_align)
