"""Duel screen: lobby address, match button, status line and guess input.

The screen holds no session logic. It renders what the controller's
callbacks tell it and forwards clicks and key presses to the controller.
"""

import time

import pygame

from . import settings
from .constants import (
    WINDOW_WIDTH, COLOR_BG, COLOR_TEXT, COLOR_TEXT_DIM, COLOR_PROMPT,
    TONE_COLORS, PROMPT_DURATION, DEFAULT_RANGE, DEFAULT_SERVER_ADDRESS,
)
from .network.controller import DuelSessionController
from .network.phrases import PhraseSet
from .network.protocol import DuelHints
from .text_input import TextInput, draw_text_input_field
from .ui import Button, Panel, FontManager


class DuelScreen:
    """Single-screen UI bound to a DuelSessionController."""

    def __init__(self, controller: DuelSessionController, phrases: PhraseSet, server_address: str):
        self.controller = controller
        self.phrases = phrases
        labels = phrases.labels

        # Widgets
        self.server_input = TextInput(value=server_address, max_length=200)
        self.server_rect = pygame.Rect(40, 115, 540, 40)
        self.save_button = Button(pygame.Rect(600, 115, 160, 40), labels['save'])
        self.find_button = Button(pygame.Rect(40, 175, 720, 48), labels['find'], style='primary')

        self.duel_panel = Panel(pygame.Rect(40, 300, 720, 190))
        self.guess_input = TextInput(max_length=3, allowed_chars='0123456789-', enabled=False)
        self.guess_rect = pygame.Rect(60, 415, 440, 44)
        self.guess_button = Button(pygame.Rect(520, 415, 220, 44), labels['guess'],
                                   style='accent', enabled=False)

        # Display state driven by the controller
        self.status_text = ""
        self.status_tone = 'info'
        self.duel_visible = False
        self.range_text = phrases.format_range(*DEFAULT_RANGE)
        self.hints_text = ""
        self.prompt_text = ""
        self._prompt_until = 0.0

        self._bind(controller)

    def _bind(self, controller: DuelSessionController):
        controller.on_status = self.set_status
        controller.on_duel_visible = self.set_duel_visible
        controller.on_input_enabled = self.set_input_enabled
        controller.on_range = self.set_range
        controller.on_match_available = self.set_match_available
        controller.on_clear_input = self.guess_input.clear
        controller.on_prompt = self.show_prompt
        controller.on_hints = self.set_hints

    # =========================================================================
    # CONTROLLER CALLBACKS
    # =========================================================================

    def set_status(self, text: str, tone: str = 'info'):
        self.status_text = text
        self.status_tone = tone

    def set_duel_visible(self, visible: bool):
        self.duel_visible = visible
        if not visible:
            self.hints_text = ""

    def set_input_enabled(self, enabled: bool):
        self.guess_input.set_enabled(enabled)
        self.guess_button.enabled = enabled
        if enabled:
            self.server_input.deactivate()
            self.guess_input.activate()

    def set_range(self, low: int, high: int):
        self.range_text = self.phrases.format_range(low, high)

    def set_hints(self, hints: DuelHints):
        self.hints_text = self.phrases.format_hints(hints)

    def set_match_available(self, available: bool):
        self.find_button.enabled = available

    def show_prompt(self, text: str):
        self.prompt_text = text
        self._prompt_until = time.time() + PROMPT_DURATION

    # =========================================================================
    # INPUT
    # =========================================================================

    def handle_event(self, event: pygame.event.Event):
        if event.type == pygame.MOUSEMOTION:
            for button in (self.save_button, self.find_button, self.guess_button):
                button.update(event.pos)

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._handle_click(event.pos)

        elif event.type in (pygame.KEYDOWN, pygame.TEXTINPUT):
            if self.server_input.handle_event(event) == 'submit':
                self.save_server_address()
            elif self.guess_input.handle_event(event) == 'submit':
                self.submit_guess()

    def _handle_click(self, pos):
        if self.find_button.clicked(pos):
            self.start_match()
        elif self.save_button.clicked(pos):
            self.save_server_address()
        elif self.duel_visible and self.guess_button.clicked(pos):
            self.submit_guess()
        elif self.server_rect.collidepoint(pos):
            self.guess_input.deactivate()
            self.server_input.activate()
        elif self.duel_visible and self.guess_rect.collidepoint(pos):
            self.server_input.deactivate()
            self.guess_input.activate()

    def start_match(self):
        address = self.server_input.value.strip() or DEFAULT_SERVER_ADDRESS
        self.server_input.deactivate()
        self.controller.start_new_match(address)

    def save_server_address(self):
        address = self.server_input.value.strip()
        if not address:
            return
        settings.set_server_address(address)
        self.server_input.deactivate()
        self.show_prompt(self.phrases.labels['saved'])

    def submit_guess(self):
        self.controller.submit_guess(self.guess_input.value)

    # =========================================================================
    # DRAWING
    # =========================================================================

    def draw(self, screen: pygame.Surface):
        screen.fill(COLOR_BG)
        labels = self.phrases.labels

        self._draw_centered(screen, labels['title'], FontManager.get('title'), COLOR_TEXT, 50)

        small = FontManager.get('small')
        medium = FontManager.get('medium')
        screen.blit(small.render(labels['server'], True, COLOR_TEXT_DIM), (40, 92))
        draw_text_input_field(screen, medium, self.server_input, self.server_rect)
        self.save_button.draw(screen, medium)
        self.find_button.draw(screen, FontManager.get('large'))

        if self.status_text:
            color = TONE_COLORS.get(self.status_tone, COLOR_TEXT)
            self._draw_centered(screen, self.status_text, FontManager.get('large'), color, 262)

        if self.duel_visible:
            self.duel_panel.draw(screen)
            self._draw_centered(screen, self.range_text, medium, COLOR_TEXT, 332)
            if self.hints_text:
                self._draw_centered(screen, self.hints_text, small, COLOR_TEXT_DIM, 370)
            draw_text_input_field(screen, medium, self.guess_input, self.guess_rect)
            self.guess_button.draw(screen, medium)

        if self.prompt_text and time.time() < self._prompt_until:
            self._draw_centered(screen, self.prompt_text, medium, COLOR_PROMPT, 520)

    @staticmethod
    def _draw_centered(screen: pygame.Surface, text: str, font: pygame.font.Font,
                       color, center_y: int):
        surface = font.render(text, True, color)
        screen.blit(surface, ((WINDOW_WIDTH - surface.get_width()) // 2,
                              center_y - surface.get_height() // 2))
