"""Single-line text fields for the duel screen (server address, guess)."""

import time
from dataclasses import dataclass, field
from typing import Optional

import pygame

from .constants import COLOR_TEXT, COLOR_TEXT_DIM

BLINK_PERIOD = 0.5

FIELD_FILL = (40, 40, 52)
FIELD_FILL_FOCUSED = (50, 50, 64)
FIELD_FILL_DISABLED = (34, 34, 42)
FIELD_OUTLINE = (82, 82, 96)
FIELD_OUTLINE_FOCUSED = (122, 100, 168)


@dataclass
class TextInput:
    """Text field with a cursor. Unfocused or disabled fields ignore keys."""

    value: str = ""
    cursor_pos: int = 0
    max_length: int = 100
    allowed_chars: Optional[str] = None  # None = anything
    enabled: bool = True
    active: bool = False

    _blink_start: float = field(default_factory=time.time)

    def activate(self):
        """Give the field keyboard focus."""
        if not self.enabled:
            return
        self.active = True
        self.cursor_pos = len(self.value)
        self._blink_start = time.time()
        pygame.key.start_text_input()

    def deactivate(self):
        self.active = False

    def set_enabled(self, enabled: bool):
        """Disabling also drops focus."""
        self.enabled = enabled
        if not enabled:
            self.active = False

    def clear(self):
        self.set_value("")

    def set_value(self, value: str):
        self.value = self._filter(value)[:self.max_length]
        self.cursor_pos = len(self.value)

    def insert_text(self, text: str):
        """Insert at the cursor; characters past max_length are dropped."""
        room = self.max_length - len(self.value)
        text = self._filter(text)[:max(room, 0)]
        if not text:
            return
        before, after = self.value[:self.cursor_pos], self.value[self.cursor_pos:]
        self.value = before + text + after
        self.cursor_pos += len(text)

    def delete_char(self, forward: bool = False):
        """Backspace, or Delete when forward is set."""
        pos = self.cursor_pos if forward else self.cursor_pos - 1
        if 0 <= pos < len(self.value):
            self.value = self.value[:pos] + self.value[pos + 1:]
            self.cursor_pos = pos

    def move_cursor(self, delta: int):
        self.cursor_pos = max(0, min(len(self.value), self.cursor_pos + delta))
        self._blink_start = time.time()

    @property
    def cursor_shown(self) -> bool:
        elapsed = time.time() - self._blink_start
        return int(elapsed / BLINK_PERIOD) % 2 == 0

    def _filter(self, text: str) -> str:
        if self.allowed_chars is None:
            return text
        return ''.join(c for c in text if c in self.allowed_chars)

    def handle_event(self, event: pygame.event.Event) -> Optional[str]:
        """Returns 'submit' when Enter is pressed in a focused field."""
        if not self.active or not self.enabled:
            return None

        if event.type == pygame.TEXTINPUT:
            self.insert_text(event.text)
        elif event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                return 'submit'
            if event.key == pygame.K_ESCAPE:
                self.deactivate()
            elif event.key == pygame.K_BACKSPACE:
                self.delete_char()
            elif event.key == pygame.K_DELETE:
                self.delete_char(forward=True)
            elif event.key in (pygame.K_LEFT, pygame.K_RIGHT):
                self.move_cursor(-1 if event.key == pygame.K_LEFT else 1)
            elif event.key == pygame.K_HOME:
                self.move_cursor(-self.cursor_pos)
            elif event.key == pygame.K_END:
                self.move_cursor(len(self.value) - self.cursor_pos)
        return None


def draw_text_input_field(screen: pygame.Surface, font: pygame.font.Font,
                          text_input: TextInput, rect: pygame.Rect):
    """Draw the field box, its text and (when focused) the cursor."""
    if not text_input.enabled:
        fill, outline, color = FIELD_FILL_DISABLED, FIELD_OUTLINE, COLOR_TEXT_DIM
    elif text_input.active:
        fill, outline, color = FIELD_FILL_FOCUSED, FIELD_OUTLINE_FOCUSED, COLOR_TEXT
    else:
        fill, outline, color = FIELD_FILL, FIELD_OUTLINE, COLOR_TEXT

    pygame.draw.rect(screen, fill, rect)
    pygame.draw.rect(screen, outline, rect, 2)

    x = rect.x + 10
    y = rect.centery - font.get_height() // 2
    screen.blit(font.render(text_input.value, True, color), (x, y))

    if text_input.active and text_input.cursor_shown:
        cursor_x = x + font.size(text_input.value[:text_input.cursor_pos])[0]
        pygame.draw.line(screen, color, (cursor_x, y + 2), (cursor_x, y + font.get_height() - 2), 2)
