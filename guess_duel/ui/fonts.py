"""
Named fonts for the duel screen, created once after pygame.init().
"""
import pygame
from typing import Dict


# SysFont takes a comma-separated preference list; the CJK faces come
# first so Chinese server messages render
FONT_FAMILY = 'microsoftyahei,notosanscjksc,notosanscjk,wenquanyimicrohei,arial'

FONT_SIZES = {
    'title': 36,
    'large': 24,
    'medium': 20,
    'small': 16,
}


class FontManager:
    """
    Usage:
        FontManager.init()  # Call once after pygame.init()
        font = FontManager.get('medium')
    """

    _fonts: Dict[str, pygame.font.Font] = {}

    @classmethod
    def init(cls):
        cls._fonts = {name: pygame.font.SysFont(FONT_FAMILY, size)
                      for name, size in FONT_SIZES.items()}

    @classmethod
    def get(cls, name: str) -> pygame.font.Font:
        """Font by name; unknown names get the medium font."""
        if name not in FONT_SIZES:
            name = 'medium'
        if name not in cls._fonts:
            cls._fonts[name] = pygame.font.SysFont(FONT_FAMILY, FONT_SIZES[name])
        return cls._fonts[name]
