"""Entity store interface and its SQLAlchemy implementation."""

import contextlib
from collections.abc import Iterator
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lendgraph.database.models import Base
from lendgraph.exceptions.store import EntityStoreError


class EntityStore(Protocol):
    """
    Key-value store of projected entities, keyed by entity type and opaque string id.
    """

    def load[T: Base](self, entity_type: type[T], entity_id: str) -> T | None:
        """Return the entity with the given id, or None if it does not exist."""
        ...

    def save(self, entity: Base) -> None:
        """Insert or update the entity."""
        ...

    def transaction(self) -> contextlib.AbstractContextManager[None]:
        """
        Group writes so that they are all kept on a clean exit, or all discarded if the block
        raises.
        """
        ...


class SqlEntityStore:
    """
    Entity store backed by a SQLAlchemy session.

    Saved entities are flushed immediately so that later loads within the same session observe
    them. Committing the session is the caller's responsibility.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def load[T: Base](self, entity_type: type[T], entity_id: str) -> T | None:
        try:
            return self.session.get(entity_type, entity_id)
        except SQLAlchemyError as exc:
            raise EntityStoreError(
                operation="load", entity_type=entity_type, entity_id=entity_id
            ) from exc

    def save(self, entity: Base) -> None:
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="save", entity_type=type(entity)) from exc

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        # A savepoint is released on a clean exit and rolled back if the block raises, which also
        # expunges entities created inside it and expires those modified inside it
        with self.session.begin_nested():
            yield

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="commit", entity_type=Base) from exc
