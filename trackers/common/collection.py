"""Persisted keyed collection.

An in-memory mapping of entity id -> entity, mirrored to one key of a
KeyValueStore as a JSON object. Every tracker instantiates one per entity
kind.

Usage:
    packages = PersistedCollection(store, "shippingTracker_packages", Shipment)
    packages.add(shipment)
    packages.update(shipment.id, {"status": "delivered"})
    packages.remove(shipment.id)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as ModelValidationError

from .errors import NotFound, PersistenceError
from .models import TrackedEntity
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=TrackedEntity)


class PersistedCollection(Generic[E]):
    """Owns every entity of one kind and keeps the store in sync.

    Mutations are applied in memory first and then written through. When the
    write fails the in-memory state is kept (the session stays usable) and
    PersistenceError is raised so the caller can warn the user.

    Entities handed out by get()/values() are copies; mutate through
    update() so the change is persisted.
    """

    def __init__(self, store: KeyValueStore, key: str, model: type[E]) -> None:
        self.store = store
        self.key = key
        self.model = model
        self._items: dict[str, E] = self.load()

    # --- Loading ---

    def load(self) -> dict[str, E]:
        """Read the whole collection from storage.

        Never raises: missing or unparsable data yields an empty mapping,
        and records that fail validation are skipped.
        """
        raw = self.store.get(self.key, {})
        if not isinstance(raw, Mapping):
            logger.warning(
                "Stored value for '%s' is not an object (%s); starting empty",
                self.key, type(raw).__name__,
            )
            return {}

        items: dict[str, E] = {}
        for entity_id, record in raw.items():
            try:
                entity = self.model.model_validate(record)
            except ModelValidationError as exc:
                logger.warning(
                    "Skipping invalid %s record '%s': %s",
                    self.model.__name__, entity_id, exc.errors()[:1],
                )
                continue
            items[str(entity_id)] = entity

        logger.debug("Loaded %d %s records from '%s'", len(items), self.model.__name__, self.key)
        return items

    def reload(self) -> None:
        """Discard in-memory state and re-read storage."""
        self._items = self.load()

    # --- Reads ---

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def ids(self) -> list[str]:
        return list(self._items)

    def get(self, entity_id: str) -> E | None:
        entity = self._items.get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def values(self) -> list[E]:
        """All entities in insertion order (copies)."""
        return [e.model_copy(deep=True) for e in self._items.values()]

    def find_by(self, field: str, value: Any) -> E | None:
        """First entity whose attribute equals value, e.g. a natural key."""
        for entity in self._items.values():
            if getattr(entity, field, None) == value:
                return entity.model_copy(deep=True)
        return None

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """JSON-ready mapping of id -> record, as written to storage."""
        return {
            entity_id: entity.model_dump(mode="json")
            for entity_id, entity in self._items.items()
        }

    # --- Mutations ---

    def add(self, entity: E) -> E:
        """Insert a new entity.

        Raises:
            ValueError: If the id is already present (callers pre-check).
            PersistenceError: If the write failed (entity stays in memory).
        """
        if entity.id in self._items:
            raise ValueError(f"{self.model.__name__} id '{entity.id}' already exists")
        self._items[entity.id] = entity.model_copy(deep=True)
        self._persist("add")
        return entity

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> E:
        """Shallow-merge patch fields into an existing entity.

        Raises:
            NotFound: If entity_id is absent.
            pydantic.ValidationError: If the merged record is invalid
                (nothing is changed).
            PersistenceError: If the write failed (change stays in memory).
        """
        current = self._items.get(entity_id)
        if current is None:
            raise NotFound(f"No {self.model.__name__} with id '{entity_id}'")

        merged = {**current.model_dump(), **dict(patch), "id": entity_id}
        updated = self.model.model_validate(merged)
        self._items[entity_id] = updated
        self._persist("update")
        return updated.model_copy(deep=True)

    def remove(self, entity_id: str) -> E | None:
        """Delete an entity and return it, or None when absent."""
        entity = self._items.pop(entity_id, None)
        if entity is None:
            return None
        self._persist("remove")
        return entity

    def remove_where(self, predicate: Callable[[E], bool]) -> list[E]:
        """Delete every entity matching predicate; returns the removed ones."""
        removed = [e for e in self._items.values() if predicate(e)]
        if not removed:
            return []
        for entity in removed:
            del self._items[entity.id]
        self._persist("remove_where")
        return removed

    def clear(self) -> None:
        """Empty the collection and persist the empty state."""
        self._items.clear()
        self._persist("clear")

    def _persist(self, operation: str) -> None:
        try:
            self.store.set(self.key, self.snapshot())
        except PersistenceError:
            logger.warning(
                "%s on '%s' applied in memory but not persisted", operation, self.key
            )
            raise
        except OSError as exc:
            logger.warning(
                "%s on '%s' applied in memory but not persisted: %s", operation, self.key, exc
            )
            raise PersistenceError(self.key, str(exc)) from exc
