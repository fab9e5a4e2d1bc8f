"""Service layer for item business logic.

Keeps an item's record and its photo file consistent:

* create saves the photo before the record is written;
* replace_photo checks the item first, saves the new photo, repoints the
  record, and only then deletes the old file;
* delete removes the record before touching the file.

A failure part-way through can leave an unreferenced photo behind, never a
record pointing at a missing file. ``reap_orphan_photos`` sweeps those up.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import BinaryIO

from inventory.errors import NotFoundError, ValidationError
from inventory.repositories.item_repository import ItemRecord, ItemRepository
from inventory.storage.photo_store import PhotoStore, PhotoUpload

logger = logging.getLogger(__name__)


def with_photo_note(item: ItemRecord, photo_url: str | None) -> ItemRecord:
    """Return a copy whose description mentions where the photo lives.

    Presentation only; the stored record is untouched.
    """

    if not item.photo or not photo_url:
        return item
    return replace(item, description=f"{item.description}\nPhoto: {photo_url}")


class ItemService:
    """Item use-cases, identical for every repository backend."""

    def __init__(self, repository: ItemRepository, photos: PhotoStore) -> None:
        self._repo = repository
        self._photos = photos

    @property
    def photos(self) -> PhotoStore:
        return self._photos

    def create_item(
        self,
        name: str | None,
        description: str | None = None,
        photo: PhotoUpload | None = None,
    ) -> ItemRecord:
        if not name:
            raise ValidationError(message="inventory_name required")

        key = self._photos.save(photo.stream, photo.extension) if photo is not None else None
        record = ItemRecord(
            id=str(uuid.uuid4()),
            inventory_name=name,
            description=description or "",
            photo=key,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self._repo.add(record)
        except Exception:
            self._photos.delete(key)
            raise

        logger.info("Created item %s", record.id)
        return record

    def list_items(self) -> Sequence[ItemRecord]:
        return self._repo.list_all()

    def get_item(self, item_id: str) -> ItemRecord:
        item = self._repo.get(item_id)
        if item is None:
            raise NotFoundError(message=f"Item {item_id} not found")
        return item

    def find_item(self, item_id: str) -> ItemRecord:
        return self.get_item(item_id)

    def update_item(
        self,
        item_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> ItemRecord:
        # Only truthy values patch: "" leaves the stored value alone.
        changes = {
            field: value
            for field, value in (("inventory_name", name), ("description", description))
            if value
        }
        if not changes:
            return self.get_item(item_id)

        item = self._repo.update_fields(item_id, changes)
        if item is None:
            raise NotFoundError(message=f"Item {item_id} not found")
        return item

    def replace_photo(self, item_id: str, photo: PhotoUpload | None) -> ItemRecord:
        if photo is None or not photo.filename:
            raise ValidationError(message="No photo")

        current = self.get_item(item_id)
        updated: list[ItemRecord] = []

        def _commit(new_key: str) -> None:
            item = self._repo.set_photo(item_id, new_key)
            if item is None:
                raise NotFoundError(message=f"Item {item_id} not found")
            updated.append(item)

        self._photos.replace(current.photo, photo.stream, photo.extension, on_saved=_commit)
        logger.info("Replaced photo of item %s", item_id)
        return updated[0]

    def delete_item(self, item_id: str) -> ItemRecord:
        removed = self._repo.remove(item_id)
        if removed is None:
            raise NotFoundError(message=f"Item {item_id} not found")

        self._photos.delete(removed.photo)
        logger.info("Deleted item %s", item_id)
        return removed

    def open_photo(self, item_id: str) -> tuple[BinaryIO, str]:
        """Readable handle and key for the item's photo."""

        item = self.get_item(item_id)
        if not item.photo:
            raise NotFoundError(message="Not found")
        return self._photos.open(item.photo), item.photo

    def reap_orphan_photos(self, dry_run: bool = False) -> list[str]:
        referenced = [item.photo for item in self._repo.list_all()]
        return self._photos.reap_orphans(referenced, dry_run=dry_run)
