"""Relational backend: one row per item, one transaction per operation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from inventory.errors import StorageError
from inventory.models.base import Base
from inventory.models.item import ItemRow
from inventory.repositories.item_repository import PATCHABLE_FIELDS, ItemRecord, as_utc

logger = logging.getLogger(__name__)


def _to_record(row: ItemRow) -> ItemRecord:
    return ItemRecord(
        id=row.id,
        inventory_name=row.inventory_name,
        description=row.description or "",
        photo=row.photo or None,
        created_at=as_utc(row.created_at) if row.created_at else None,
    )


class SqlItemRepository:
    """CRUD operations for ItemRow.

    With ``schema_ready=False`` the tables are created (if missing) before the
    first operation, so a database that was down at startup becomes usable
    without a restart.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | Callable[[], Session],
        schema_ready: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._schema_ready = schema_ready
        self._schema_lock = threading.Lock()

    def _ensure_schema(self, session: Session) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if not self._schema_ready:
                Base.metadata.create_all(bind=session.get_bind())
                self._schema_ready = True
                logger.info("Database schema ensured")

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            self._ensure_schema(session)
            with session.begin():
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Database operation failed")
            raise StorageError("Database unavailable") from exc
        finally:
            session.close()

    def add(self, record: ItemRecord) -> ItemRecord:
        with self._transaction() as session:
            session.add(
                ItemRow(
                    id=record.id,
                    inventory_name=record.inventory_name,
                    description=record.description,
                    photo=record.photo,
                    created_at=record.created_at,
                )
            )
        return record

    def list_all(self) -> Sequence[ItemRecord]:
        with self._transaction() as session:
            rows = session.scalars(select(ItemRow).order_by(ItemRow.created_at.asc())).all()
            return [_to_record(r) for r in rows]

    def get(self, item_id: str) -> ItemRecord | None:
        with self._transaction() as session:
            row = session.get(ItemRow, item_id)
            return _to_record(row) if row is not None else None

    def update_fields(self, item_id: str, changes: Mapping[str, str]) -> ItemRecord | None:
        values = {k: v for k, v in changes.items() if k in PATCHABLE_FIELDS}
        return self._update(item_id, values)

    def set_photo(self, item_id: str, photo: str | None) -> ItemRecord | None:
        return self._update(item_id, {"photo": photo})

    def remove(self, item_id: str) -> ItemRecord | None:
        with self._transaction() as session:
            row = session.get(ItemRow, item_id)
            if row is None:
                return None
            removed = _to_record(row)
            session.execute(delete(ItemRow).where(ItemRow.id == item_id))
            return removed

    def _update(self, item_id: str, values: Mapping[str, object]) -> ItemRecord | None:
        with self._transaction() as session:
            if values:
                result = session.execute(
                    update(ItemRow)
                    .where(ItemRow.id == item_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    return None
            row = session.get(ItemRow, item_id, populate_existing=True)
            return _to_record(row) if row is not None else None
