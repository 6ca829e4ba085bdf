"""UI components module."""
from .fonts import FontManager
from .components import Button, Panel, ButtonStyle, BUTTON_STYLES

__all__ = [
    'FontManager',
    'Button', 'Panel',
    'ButtonStyle', 'BUTTON_STYLES',
]
