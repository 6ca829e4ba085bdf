"""Guess Duel - client for a two-player number-guessing duel."""

from .version import __version__
