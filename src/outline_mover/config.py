"""Configuration constants for outline-mover."""

from pathlib import Path

# Per-attempt request timeout, in seconds.
FETCH_TIMEOUT: float = 8.0

# Retries after the first failed attempt (timeouts and transport errors only).
MAX_RETRIES: int = 3

# First backoff delay in seconds; doubled after every failed attempt.
INITIAL_BACKOFF: float = 0.5

# collections.list page size. Offsets start at 1, as in the Outline API examples.
COLLECTIONS_PAGE_SIZE: int = 25
FIRST_PAGE_OFFSET: int = 1

# collections.documents is fetched as a single large page.
DOCUMENTS_LIMIT: int = 1000

# Settings file location. First file found is used; the first entry is where new
# settings are written.
SETTINGS_FILES: list[Path] = [
    Path("~/.config/outline-mover/settings.json").expanduser(),
    Path("~/.outline-mover.json").expanduser(),
]

SETTINGS_KEYS: tuple[str, ...] = ("outline_url", "api_token", "collection_id")


def resolve_settings_file() -> Path:
    """Return the first existing settings file, or the default location."""
    for candidate in SETTINGS_FILES:
        if candidate.is_file():
            return candidate
    return SETTINGS_FILES[0]
