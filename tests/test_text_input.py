"""Tests for the guess and server address text fields."""
import pygame

from guess_duel.text_input import TextInput


def key(k):
    return pygame.event.Event(pygame.KEYDOWN, key=k)


def typed(text):
    return pygame.event.Event(pygame.TEXTINPUT, text=text)


class TestEditing:
    def test_insert_filters_and_truncates(self):
        field = TextInput(max_length=3, allowed_chars="0123456789")
        field.insert_text("4a2b99")
        assert field.value == "429"
        assert field.cursor_pos == 3

    def test_insert_at_cursor(self):
        field = TextInput()
        field.set_value("15")
        field.move_cursor(-1)
        field.insert_text("0")
        assert field.value == "105"

    def test_backspace_and_delete(self):
        field = TextInput()
        field.set_value("123")
        field.delete_char()
        assert field.value == "12"
        field.move_cursor(-2)
        field.delete_char(forward=True)
        assert field.value == "2"


class TestEvents:
    def test_inactive_field_ignores_input(self):
        field = TextInput()
        assert field.handle_event(typed("5")) is None
        assert field.value == ""

    def test_typing_and_submit(self):
        field = TextInput(active=True)
        field.handle_event(typed("42"))
        assert field.value == "42"
        assert field.handle_event(key(pygame.K_RETURN)) == 'submit'
        assert field.handle_event(key(pygame.K_KP_ENTER)) == 'submit'

    def test_disabled_field_ignores_submit(self):
        field = TextInput(active=True)
        field.set_enabled(False)
        assert field.handle_event(key(pygame.K_RETURN)) is None
        assert not field.active

    def test_escape_drops_focus(self):
        field = TextInput(active=True)
        field.handle_event(key(pygame.K_ESCAPE))
        assert not field.active
