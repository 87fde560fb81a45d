"""Base class for tracker services.

Provides shared logic for the load → mutate → persist → re-render cycle:
request tokens that discard stale enrichment responses, and routing of
persistence warnings to the notifier. Tracker-specific services (shipping,
shopping, movies) inherit and add their own operations.
"""

from __future__ import annotations

import itertools
import logging
from typing import Generic

from .collection import E, PersistedCollection
from .errors import PersistenceError
from .formatting import timestamp_id, uid
from .notify import Notifier

logger = logging.getLogger(__name__)

PERSISTENCE_WARNING = "Saved for this session only: {detail}. Changes may be lost on restart."


class TrackerService(Generic[E]):
    """Owns one PersistedCollection and the notifier for a tracker session."""

    def __init__(self, collection: PersistedCollection[E], notifier: Notifier | None = None) -> None:
        self.collection = collection
        self.notifier = notifier or Notifier()
        self._request_tokens: dict[str, int] = {}
        self._tokens = itertools.count(1)

    # --- Ids ---

    def _new_id(self, prefix: str) -> str:
        entity_id = timestamp_id(prefix)
        while entity_id in self.collection:
            entity_id = f"{timestamp_id(prefix)}_{uid()}"
        return entity_id

    # --- Stale response guard ---

    def _begin_request(self, entity_id: str) -> int:
        """Issue a new token for an enrichment of entity_id.

        Tokens come from one counter for the whole service, so a token issued
        before a remove never matches one issued after a re-add.
        """
        token = next(self._tokens)
        self._request_tokens[entity_id] = token
        return token

    def _accepts(self, entity_id: str, token: int) -> bool:
        """Whether a response for token may still be merged.

        False when the entity was removed meanwhile or a newer request for
        it has been issued.
        """
        if entity_id not in self.collection:
            logger.info("Discarding response for removed entity %s", entity_id)
            return False
        if self._request_tokens.get(entity_id) != token:
            logger.info("Discarding stale response for %s (token %d)", entity_id, token)
            return False
        return True

    def _forget(self, entity_id: str) -> None:
        self._request_tokens.pop(entity_id, None)

    # --- Feedback ---

    def _warn_persistence(self, exc: PersistenceError) -> None:
        self.notifier.error(PERSISTENCE_WARNING.format(detail=exc.message), duration_ms=5000)
