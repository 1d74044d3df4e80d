# src/game/assets.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import pygame
from .config import (
    CHARACTER_W, CHARACTER_H, PIPE_W, PIPE_MAX_H, CLOUD_W, CLOUD_H,
    COLOR_PIPE, COLOR_WHITE, COLOR_BLACK
)

logger = logging.getLogger(__name__)

ASSET_FILES: Dict[str, str] = {
    "buddy": "Buddy.png",
    "neet": "Neet.png",
    "pipe": "pipe.svg",
    "cloud": "cloud.svg",
}


class AssetLoadError(RuntimeError):
    """A required image is missing or could not be decoded. Fatal: the game won't start."""


@dataclass
class Assets:
    dogs: List[pygame.Surface]      # one per selectable character, same order as CHARACTER_NAMES
    pipe: Optional[pygame.Surface]
    cloud: Optional[pygame.Surface]


class AssetLoader:
    """
    Loads the fixed image set from `asset_dir`. Every file must resolve, or
    AssetLoadError is raised. With no directory, draws simple placeholder sprites.
    """
    def __init__(self, asset_dir: str | Path | None = None):
        self.asset_dir = Path(asset_dir) if asset_dir is not None else None

    def load(self) -> Assets:
        if self.asset_dir is None:
            logger.info("No asset directory given, using built-in sprites")
            return builtin_assets()
        images = {key: self._load_image(self.asset_dir / name) for key, name in ASSET_FILES.items()}
        return Assets(dogs=[images["buddy"], images["neet"]],
                      pipe=images["pipe"], cloud=images["cloud"])

    @staticmethod
    def _load_image(path: Path) -> pygame.Surface:
        if not path.is_file():
            raise AssetLoadError(f"Failed to load image: {path} (not found)")
        try:
            img = pygame.image.load(str(path))
        except (pygame.error, OSError) as e:
            raise AssetLoadError(f"Failed to load image: {path} ({e})") from e
        if pygame.display.get_init() and pygame.display.get_surface() is not None:
            img = img.convert_alpha()
        return img


def _dog_sprite(body: Tuple[int, int, int], ear: Tuple[int, int, int]) -> pygame.Surface:
    w, h = CHARACTER_W, CHARACTER_H

    def box(fx, fy, fw, fh) -> pygame.Rect:
        return pygame.Rect(int(w * fx), int(h * fy), int(w * fw), int(h * fh))

    s = pygame.Surface((w, h), pygame.SRCALPHA)
    pygame.draw.rect(s, body, box(0.10, 0.40, 0.70, 0.35), border_radius=8)   # body
    pygame.draw.rect(s, body, box(0.55, 0.15, 0.40, 0.35), border_radius=8)   # head
    pygame.draw.rect(s, ear, box(0.60, 0.05, 0.12, 0.18))                     # ear
    pygame.draw.circle(s, COLOR_BLACK, (int(w * 0.82), int(h * 0.27)), 4)     # eye
    for lx in (0.15, 0.30, 0.55, 0.68):                                       # legs
        pygame.draw.rect(s, body, box(lx, 0.72, 0.09, 0.28))
    return s


def builtin_assets() -> Assets:
    pipe = pygame.Surface((PIPE_W, PIPE_MAX_H), pygame.SRCALPHA)
    pipe.fill(COLOR_PIPE)
    pygame.draw.rect(pipe, COLOR_BLACK, pipe.get_rect(), width=3)

    cloud = pygame.Surface((CLOUD_W, CLOUD_H), pygame.SRCALPHA)
    pygame.draw.ellipse(cloud, COLOR_WHITE, cloud.get_rect())

    return Assets(
        dogs=[_dog_sprite((196, 140, 80), (120, 80, 40)),    # Buddy
              _dog_sprite((60, 60, 60), (20, 20, 20))],      # Neet
        pipe=pipe,
        cloud=cloud,
    )
