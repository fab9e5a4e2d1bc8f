"""Repository contract for Item persistence.

Backends only store records. Photo files, identifier minting and validation
are handled once in :class:`inventory.services.item_service.ItemService`, so
every backend behaves the same from the outside.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

PATCHABLE_FIELDS = ("inventory_name", "description")


@dataclass(frozen=True)
class ItemRecord:
    id: str
    inventory_name: str
    description: str = ""
    photo: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "inventory_name": self.inventory_name,
            "description": self.description,
            "photo": self.photo,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ItemRecord:
        created = raw.get("created_at")
        return cls(
            id=str(raw["id"]),
            inventory_name=str(raw.get("inventory_name") or ""),
            description=str(raw.get("description") or ""),
            photo=raw.get("photo") or None,
            created_at=as_utc(datetime.fromisoformat(created)) if created else None,
        )


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ItemRepository(Protocol):
    """Record-level operations every backend provides.

    Lookups return ``None`` for unknown ids; storage failures raise
    :class:`inventory.errors.StorageError`.
    """

    def add(self, record: ItemRecord) -> ItemRecord: ...

    def list_all(self) -> Sequence[ItemRecord]: ...

    def get(self, item_id: str) -> ItemRecord | None: ...

    def update_fields(self, item_id: str, changes: Mapping[str, str]) -> ItemRecord | None: ...

    def set_photo(self, item_id: str, photo: str | None) -> ItemRecord | None: ...

    def remove(self, item_id: str) -> ItemRecord | None: ...
