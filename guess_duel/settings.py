"""Settings management - saves and loads user preferences."""
import json
import logging
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_SERVER_ADDRESS, DEFAULT_LANGUAGE, LANGUAGES

logger = logging.getLogger(__name__)

# Settings file location (in user's home directory)
SETTINGS_DIR = Path.home() / ".guess_duel"
SETTINGS_FILE = SETTINGS_DIR / "settings.json"

# Default settings
DEFAULT_SETTINGS = {
    "server_address": DEFAULT_SERVER_ADDRESS,
    "language": DEFAULT_LANGUAGE,
}


def load_settings(path: Optional[Path] = None) -> dict:
    """Load settings from file, or return defaults if file doesn't exist."""
    path = path or SETTINGS_FILE
    try:
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                saved = json.load(f)
            if not isinstance(saved, dict):
                raise ValueError("settings root is not an object")
            # Merge with defaults (in case new settings were added)
            settings = DEFAULT_SETTINGS.copy()
            settings.update(saved)
            logger.debug(f"Settings loaded from {path}: {settings}")
            return settings
        logger.debug(f"Settings file not found at {path}, using defaults")
    except (ValueError, OSError) as e:
        logger.warning(f"Failed to load settings: {e}")
    return DEFAULT_SETTINGS.copy()


def save_settings(settings: dict, path: Optional[Path] = None):
    """Save settings to file."""
    path = path or SETTINGS_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2, ensure_ascii=False)
        logger.info(f"Settings saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save settings: {e}")


def get_server_address(path: Optional[Path] = None) -> str:
    """Get saved lobby server address."""
    address = load_settings(path).get("server_address")
    if not isinstance(address, str) or not address.strip():
        return DEFAULT_SERVER_ADDRESS
    return address.strip()


def set_server_address(address: str, path: Optional[Path] = None):
    """Save lobby server address."""
    settings = load_settings(path)
    settings["server_address"] = address.strip()
    save_settings(settings, path)


def get_language(path: Optional[Path] = None) -> str:
    """Get saved language code ('en' or 'zh')."""
    language = load_settings(path).get("language")
    return language if language in LANGUAGES else DEFAULT_LANGUAGE


def set_language(language: str, path: Optional[Path] = None):
    """Save language code."""
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    settings = load_settings(path)
    settings["language"] = language
    save_settings(settings, path)
