"""Settings storage with an in-memory cache of last-read values."""

import json
import re
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from outline_mover.api import OutlineApi
from outline_mover.config import SETTINGS_KEYS
from outline_mover.errors import OutlineError
from outline_mover.protocols import SettingsStoreProtocol

_URL_SCHEME_RE = re.compile(r"^https?://")


@dataclass(frozen=True)
class Settings:
    """Connection settings and the default source collection."""

    outline_url: str | None = None
    api_token: str | None = None
    collection_id: str | None = None


class JsonSettingsStore:
    """String settings persisted as a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        if not isinstance(data, dict):
            msg = f"Settings file {str(self.path)!r} does not contain a JSON object"
            raise ValueError(msg)
        return data

    def get(self, keys: list[str]) -> dict[str, str | None]:
        data = self._read()
        return {k: data.get(k) for k in keys}

    def set(self, values: dict[str, str]) -> None:
        data = self._read()
        data.update(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, sort_keys=True, indent=4)
            f.write("\n")
        logger.debug("Saved settings {} to {!r}", sorted(values), str(self.path))


class SettingsManager:
    """Reads settings through a store, shadowing every value it has seen.

    Cached keys are only replaced by a later ``set`` of the same key; the cache
    is never cleared.
    """

    def __init__(self, store: SettingsStoreProtocol) -> None:
        self._store = store
        self._cache: dict[str, str | None] = {}

    def get(self, keys: list[str]) -> dict[str, str | None]:
        missing = [k for k in keys if k not in self._cache]
        if missing:
            self._cache.update(self._store.get(missing))
        return {k: self._cache[k] for k in keys}

    def set(self, values: dict[str, str]) -> None:
        self._store.set(values)
        self._cache.update(values)

    def get_settings(self) -> Settings:
        values = self.get(list(SETTINGS_KEYS))
        return Settings(**values)

    def create_api(self) -> OutlineApi:
        """Build an API client from the stored URL and token.

        Raises:
            OutlineError: URL or token is not configured.
        """
        settings = self.get_settings()
        if not settings.outline_url or not settings.api_token:
            msg = "Outline URL or API token is not set. Run 'outline-mover configure' first."
            raise OutlineError(msg)
        return OutlineApi(settings.outline_url, settings.api_token)


def normalize_outline_url(url: str) -> str:
    """Strip whitespace and trailing slashes; require an http(s) scheme."""
    url = url.strip()
    if not _URL_SCHEME_RE.match(url):
        msg = "Please enter a valid URL (must start with http:// or https://)."
        raise ValueError(msg)
    return url.rstrip("/")


def mask_token(token: str) -> str:
    """Hide all but the last 5 characters of a token."""
    if len(token) <= 5:
        return token
    return "*" * (len(token) - 5) + token[-5:]


def check_connection(api: OutlineApi) -> tuple[bool, str]:
    """Try an authenticated call and describe the outcome.

    Returns:
        Tuple of (success, human-readable status).
    """
    try:
        api.auth_info()
    except OutlineError as e:
        return False, f"Connection failed: {e}"
    return True, "Connection successful!"
