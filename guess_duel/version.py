"""Version info."""

__version__ = "0.4.0"
