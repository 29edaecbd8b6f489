"""
Application Registry

Resolves platform app ids to their signing secret, display name and URL slug.
The registry is read from a JSON file once per process.
"""

import json
import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from app.core.config import settings
from app.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9-]+")


def _slug_or_empty(text: str) -> str:
    return _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")


def slugify(text: str) -> str:
    """Lowercase URL-safe alias; falls back to the input when nothing usable remains."""
    return _slug_or_empty(text) or text


@dataclass(frozen=True)
class AppSettings:
    """Settings of one configured platform application."""
    app_id: str
    secret: Optional[str]
    name: Optional[str] = None
    slug: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.slug or self.app_id

    @property
    def canonical_slug(self) -> str:
        if self.slug:
            candidate = _slug_or_empty(self.slug)
            if candidate:
                return candidate
        return slugify(self.app_id)


class AppRegistry:
    """Read-only, ordered mapping of app id to AppSettings."""

    def __init__(self, apps: Optional[Mapping[str, AppSettings]] = None):
        self._apps: Dict[str, AppSettings] = dict(apps or {})

    def __len__(self) -> int:
        return len(self._apps)

    def __iter__(self) -> Iterator[AppSettings]:
        return iter(self._apps.values())

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AppRegistry":
        """Build a registry from the decoded apps config document."""
        apps: Dict[str, AppSettings] = {}
        for app_id, entry in raw.items():
            if not isinstance(entry, Mapping):
                logger.warning(f"Ignoring apps config entry {app_id!r}: expected an object")
                continue
            apps[str(app_id)] = AppSettings(
                app_id=str(app_id),
                secret=_optional_str(entry.get("secret")),
                name=_optional_str(entry.get("name")),
                slug=_optional_str(entry.get("slug")),
            )
        return cls(apps)

    @classmethod
    def from_file(cls, path: Path) -> "AppRegistry":
        """
        Load the registry from a JSON file.

        A missing file yields an empty registry so that every lookup fails
        rather than the process refusing to start. A file that exists but
        cannot be parsed raises ConfigurationError.
        """
        if not path.is_file():
            logger.warning(f"Apps config {path} not found; no applications are registered")
            return cls()

        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read apps config {path}: {e}") from e

        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Apps config {path} must contain a JSON object")

        return cls.from_mapping(raw)

    def resolve(self, app_id: str) -> Optional[AppSettings]:
        return self._apps.get(app_id)

    def app_slug(self, app_id: str) -> str:
        """Canonical slug of an app id, also for ids that are not configured."""
        app = self._apps.get(app_id)
        if app is not None:
            return app.canonical_slug
        return slugify(app_id)

    def app_id_from_slug(self, slug: Optional[str]) -> Optional[str]:
        """
        Find the app id a slug refers to.

        Each app is checked in configuration order, first against its
        configured slug and then against its own slugified id. The first
        match wins; slugs are not required to be unique.
        """
        if slug is None:
            return None
        needle = _slug_or_empty(slug)
        if not needle:
            return None
        for app in self._apps.values():
            if app.slug and _slug_or_empty(app.slug) == needle:
                return app.app_id
            if _slug_or_empty(app.app_id) == needle:
                return app.app_id
        return None

    def resolve_app_param(self, value: Optional[str]) -> Optional[str]:
        """Turn an `app` query parameter (slug or raw id) into an app id."""
        if not value:
            return None
        return self.app_id_from_slug(value) or value


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def load_app_registry() -> AppRegistry:
    """Build the registry from settings, including the legacy single-app fallback."""
    registry = AppRegistry.from_file(Path(settings.apps_config_path))
    if len(registry) == 0 and settings.fb_app_id and settings.fb_app_secret:
        logger.info("No apps configured; using legacy FB_APP_ID/FB_APP_SECRET")
        registry = AppRegistry({
            settings.fb_app_id: AppSettings(app_id=settings.fb_app_id, secret=settings.fb_app_secret)
        })
    logger.info(f"App registry loaded with {len(registry)} application(s)")
    return registry


_registry: Optional[AppRegistry] = None
_registry_error: Optional[ConfigurationError] = None
_registry_lock = threading.Lock()


def get_app_registry() -> AppRegistry:
    """
    Process-wide registry, loaded exactly once.
    A configuration failure is remembered and re-raised on every call.
    """
    global _registry, _registry_error
    if _registry is None and _registry_error is None:
        with _registry_lock:
            if _registry is None and _registry_error is None:
                try:
                    _registry = load_app_registry()
                except ConfigurationError as e:
                    logger.error(f"App registry unavailable: {e}")
                    _registry_error = e
    if _registry_error is not None:
        raise _registry_error
    return _registry
