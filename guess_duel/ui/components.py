"""Buttons and panels for the duel screen."""
import pygame
from typing import Tuple, Optional
from dataclasses import dataclass

from ..constants import COLOR_TEXT, COLOR_TEXT_DIM

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class ButtonStyle:
    """Fill and outline colors for one kind of button."""
    fill: Color = (58, 60, 74)
    fill_hover: Color = (78, 80, 96)
    outline: Color = (104, 106, 124)
    radius: int = 6


BUTTON_STYLES = {
    'default': ButtonStyle(),
    # Find Opponent
    'primary': ButtonStyle(fill=(46, 96, 62), fill_hover=(58, 118, 76), outline=(86, 150, 104)),
    # Guess
    'accent': ButtonStyle(fill=(70, 56, 104), fill_hover=(88, 72, 126), outline=(122, 100, 168)),
}

DISABLED_FILL = (42, 42, 50)
DISABLED_OUTLINE = (66, 66, 78)


class Button:
    """
    Clickable label. Disabled buttons are greyed out and ignore clicks.

    Usage:
        find = Button(pygame.Rect(40, 175, 720, 48), "Find Opponent", style='primary')
        find.update(event.pos)            # on MOUSEMOTION
        if find.clicked(event.pos):       # on MOUSEBUTTONDOWN
            controller.start_new_match(address)
    """

    def __init__(self, rect: pygame.Rect, text: str, style: str = 'default', enabled: bool = True):
        self.rect = rect
        self.text = text
        self.style = BUTTON_STYLES.get(style, BUTTON_STYLES['default'])
        self.enabled = enabled
        self.hovered = False

    def update(self, mouse_pos: Tuple[int, int]):
        self.hovered = self.enabled and self.rect.collidepoint(mouse_pos)

    def clicked(self, pos: Tuple[int, int]) -> bool:
        return self.enabled and self.rect.collidepoint(pos)

    def draw(self, surface: pygame.Surface, font: pygame.font.Font):
        if self.enabled:
            fill = self.style.fill_hover if self.hovered else self.style.fill
            outline, label_color = self.style.outline, COLOR_TEXT
        else:
            fill, outline, label_color = DISABLED_FILL, DISABLED_OUTLINE, COLOR_TEXT_DIM

        radius = self.style.radius
        pygame.draw.rect(surface, fill, self.rect, border_radius=radius)
        pygame.draw.rect(surface, outline, self.rect, 2, border_radius=radius)

        label = font.render(self.text, True, label_color)
        surface.blit(label, label.get_rect(center=self.rect.center))


class Panel:
    """Translucent backdrop behind the duel controls."""

    def __init__(self, rect: pygame.Rect,
                 fill: Tuple[int, int, int, int] = (44, 44, 58, 220),
                 outline: Optional[Color] = (84, 84, 104)):
        self.rect = rect
        self.fill = fill
        self.outline = outline

    def draw(self, surface: pygame.Surface):
        backdrop = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        backdrop.fill(self.fill)
        surface.blit(backdrop, self.rect.topleft)
        if self.outline:
            pygame.draw.rect(surface, self.outline, self.rect, 2)
