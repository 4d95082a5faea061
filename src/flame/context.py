from __future__ import annotations

import logging
import os
from typing import Any, Callable, MutableMapping

from flame.errors import BackendConnectionError
from flame.settings import FlameConfig
from flame.storage.firestore_store import FirestoreDocumentStore


LOGGER = logging.getLogger(__name__)
EMULATOR_HOST_ENV = "FIRESTORE_EMULATOR_HOST"

ClientFactory = Callable[[FlameConfig], Any]


def _create_firestore_client(config: FlameConfig) -> Any:
    from google.cloud import firestore

    return firestore.Client(project=config.project)


class FirestoreClientHolder:
    """Builds the Firestore client on first use and hands out the same one after."""

    def __init__(
        self,
        config: FlameConfig,
        *,
        factory: ClientFactory | None = None,
        env: MutableMapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self._factory = factory or _create_firestore_client
        self._env = env if env is not None else os.environ
        self._client: Any = None
        self._store: FirestoreDocumentStore | None = None

    def get(self) -> Any:
        if self._client is not None:
            return self._client
        if self.config.use_emulator:
            self._env[EMULATOR_HOST_ENV] = self.config.emulator_address
            LOGGER.debug("Using Firestore emulator at %s", self.config.emulator_address)
        try:
            self._client = self._factory(self.config)
        except Exception as exc:
            raise BackendConnectionError(f"Failed to create Firestore client: {exc}") from exc
        return self._client

    def store(self) -> FirestoreDocumentStore:
        if self._store is None:
            self._store = FirestoreDocumentStore(self.get())
        return self._store
