"""
Key Registry - Which providers are configured, and with which credential.

The registry wraps a CredentialStore (the persistence boundary behind the
dashboard's settings form) and exposes the small read/write API the router
and the settings endpoints need. Environment keys from Settings act as
defaults for providers the store knows nothing about.

The router calls snapshot() once at the start of every route() call, so a
key saved mid-session affects the next request and never one in flight.

Usage:
    registry = KeyRegistry(JsonFileCredentialStore("./data/credentials.json"))
    registry.set(ProviderType.OPENAI, "sk-...")
    registry.is_configured(ProviderType.OPENAI)  # True
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, List, Mapping, Optional, Protocol

from tubegrow.core.config import settings
from tubegrow.ai.providers.base import ProviderType

logger = logging.getLogger("tubegrow.ai.registry")


# ---------------------------------------------------------------------------
# CREDENTIAL STORES
# ---------------------------------------------------------------------------

class CredentialStore(Protocol):
    """Key-value persistence keyed by provider name."""

    def load(self) -> Dict[str, str]:
        """Return every stored provider -> credential pair."""

    def save(self, values: Dict[str, str]) -> None:
        """Replace the stored pairs."""


class InMemoryCredentialStore:
    """Process-local store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def load(self) -> Dict[str, str]:
        return dict(self._values)

    def save(self, values: Dict[str, str]) -> None:
        self._values = dict(values)


class JsonFileCredentialStore:
    """Stores keys saved from the settings form in a JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credentials file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def save(self, values: Dict[str, str]) -> None:
        """Write a 0600 temp file beside the target, then rename it into place."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file with mode 0600
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


# ---------------------------------------------------------------------------
# REGISTRY
# ---------------------------------------------------------------------------

def default_env_keys() -> Dict[ProviderType, str]:
    """Keys configured through environment variables / .env."""
    return {
        ProviderType.GEMINI: settings.GEMINI_API_KEY,
        ProviderType.OPENAI: settings.OPENAI_API_KEY,
        ProviderType.GROK: settings.GROK_API_KEY,
    }


class KeyRegistry:
    """
    Tracks which providers have a non-empty credential.

    Args:
        store: Persistence backend for keys saved by the user
        defaults: Fallback keys per provider (usually from the environment)
    """

    def __init__(
        self,
        store: CredentialStore,
        defaults: Optional[Mapping[ProviderType, str]] = None,
    ):
        self._store = store
        self._defaults = dict(defaults or {})
        self._lock = Lock()

    def snapshot(self) -> Dict[ProviderType, str]:
        """Current non-empty credentials, read fresh from the store."""
        stored = self._store.load()
        keys: Dict[ProviderType, str] = {}
        for provider in ProviderType:
            if provider.value in stored:
                value = stored[provider.value]
            else:
                value = self._defaults.get(provider, "")
            value = (value or "").strip()
            if value:
                keys[provider] = value
        return keys

    def get(self, provider: ProviderType) -> Optional[str]:
        return self.snapshot().get(provider)

    def is_configured(self, provider: ProviderType) -> bool:
        return self.get(provider) is not None

    def configured_providers(self) -> List[ProviderType]:
        return list(self.snapshot().keys())

    def set(self, provider: ProviderType, credential: Optional[str]) -> None:
        """
        Save or clear a provider key.

        An empty or None credential is stored as "" so it also masks any
        environment default for that provider.
        """
        with self._lock:
            values = self._store.load()
            values[provider.value] = (credential or "").strip()
            self._store.save(values)
        state = "saved" if credential else "cleared"
        logger.info(f"API key {state} for {provider.value}")

    def status(self) -> Dict[str, bool]:
        """Configured flag per provider (never exposes the key itself)."""
        keys = self.snapshot()
        return {provider.value: provider in keys for provider in ProviderType}


# Shared instance backed by the settings file
key_registry = KeyRegistry(
    store=JsonFileCredentialStore(settings.CREDENTIALS_PATH),
    defaults=default_env_keys(),
)
