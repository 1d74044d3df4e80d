# src/game/canvas.py
from __future__ import annotations
from typing import Dict, Optional, Sequence, Tuple
import pygame

Color = Sequence[int]
RectLike = Tuple[float, float, float, float]


class Canvas:
    """
    The drawing surface the renderer talks to. Coordinates are in game space
    (WIDTH x HEIGHT); text y is the baseline, as on an HTML canvas.
    """
    width: int
    height: int

    def fill_rect(self, rect: RectLike, color: Color): ...
    def stroke_rect(self, rect: RectLike, color: Color, width: int = 1): ...
    def blit_image(self, image, x: float, y: float, w: float, h: float): ...
    def draw_text(self, text: str, x: float, y: float, size: int, color: Color,
                  align: str = "left"): ...
    def fill_overlay(self, color: Color): ...


def _irect(rect: RectLike) -> pygame.Rect:
    x, y, w, h = rect
    return pygame.Rect(int(x), int(y), int(w), int(h))


class PygameCanvas(Canvas):
    def __init__(self, surface: pygame.Surface, font_name: Optional[str] = "jetbrainsmono"):
        self.surface = surface
        self.width, self.height = surface.get_size()
        self.font_name = font_name
        self._fonts: Dict[int, pygame.font.Font] = {}
        self._scaled: Dict[Tuple[int, int, int], pygame.Surface] = {}

    def _font(self, size: int) -> pygame.font.Font:
        font = self._fonts.get(size)
        if font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            font = pygame.font.SysFont(self.font_name, size)
            self._fonts[size] = font
        return font

    def fill_rect(self, rect, color):
        self.surface.fill(color, _irect(rect))

    def stroke_rect(self, rect, color, width=1):
        pygame.draw.rect(self.surface, color, _irect(rect), width=width)

    def blit_image(self, image, x, y, w, h):
        if image is None:
            return
        w, h = int(w), int(h)
        if image.get_size() != (w, h):
            key = (id(image), w, h)
            scaled = self._scaled.get(key)
            if scaled is None:
                scaled = pygame.transform.scale(image, (w, h))
                self._scaled[key] = scaled
            image = scaled
        self.surface.blit(image, (int(x), int(y)))

    def draw_text(self, text, x, y, size, color, align="left"):
        img = self._font(size).render(text, True, color)
        r = img.get_rect()
        if align == "center":
            r.midbottom = (int(x), int(y))
        elif align == "right":
            r.bottomright = (int(x), int(y))
        else:
            r.bottomleft = (int(x), int(y))
        self.surface.blit(img, r)

    def fill_overlay(self, color):
        panel = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        panel.fill(color)
        self.surface.blit(panel, (0, 0))
