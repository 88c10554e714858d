"""Providers of the public keys gateways sign their tokens with."""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any

from apigw_kit.errors import BkApiError

DEFAULT_EXPIRATION = timedelta(hours=12)

ManagerFactory = Callable[[str, Any], Any]


def _random_jitter() -> float:
    return random.randrange(10000) / 1000


class PublicKeySimpleProvider:
    """Serves public keys from a fixed mapping of gateway name to PEM text."""

    def __init__(self, public_keys: Mapping[str, str]) -> None:
        self.public_keys = dict(public_keys)

    def provide_public_key(self, api_name: str) -> str:
        """Return the key of ``api_name``, or an empty string when unknown."""
        return self.public_keys.get(api_name, "")


class PublicKeyMemoryCache:
    """Fetches public keys through a gateway manager and caches them in memory.

    ``manager_factory(api_name, config)`` returns an object whose
    ``get_public_key_string()`` fetches the key. Each entry lives for
    ``expiration`` plus a random jitter of up to ten seconds. Failures are
    not cached.
    """

    def __init__(
        self,
        config: Any,
        expiration: timedelta | float,
        manager_factory: ManagerFactory,
        *,
        clock: Callable[[], float] = time.monotonic,
        jitter: Callable[[], float] = _random_jitter,
    ) -> None:
        self.config = config
        self.expiration = (
            expiration.total_seconds() if isinstance(expiration, timedelta) else float(expiration)
        )
        self._manager_factory = manager_factory
        self._clock = clock
        self._jitter = jitter
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _load(self, api_name: str) -> str:
        try:
            manager = self._manager_factory(api_name, self.config)
        except Exception as exc:
            raise BkApiError(f"failed to create manager for {api_name}") from exc
        try:
            return manager.get_public_key_string()
        except Exception as exc:
            raise BkApiError(f"failed to get public key for {api_name}") from exc

    def provide_public_key(self, api_name: str) -> str:
        """Return the cached key of ``api_name``, fetching it when missing or expired."""
        with self._lock:
            entry = self._entries.get(api_name)
            if entry is not None and entry[1] > self._clock():
                return entry[0]

        public_key = self._load(api_name)

        with self._lock:
            expires_at = self._clock() + self.expiration + self._jitter()
            self._entries[api_name] = (public_key, expires_at)
        return public_key