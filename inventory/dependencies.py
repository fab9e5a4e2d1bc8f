"""Process-wide service wiring.

The photo store, the repository backend and the item service are built once
per application and kept in ``app.extensions``; views fetch them explicitly.
"""

from __future__ import annotations

import logging

from flask import Flask, current_app

from inventory.repositories.item_repository import ItemRepository
from inventory.repositories.json_item_repository import JsonItemRepository
from inventory.services.item_service import ItemService
from inventory.storage.photo_store import PhotoStore

logger = logging.getLogger(__name__)

BACKENDS = ("file", "sql")


def build_repository(app: Flask) -> ItemRepository:
    """Instantiate the backend named by ``STORAGE_BACKEND``."""

    backend = str(app.config.get("STORAGE_BACKEND", "file")).lower().strip()
    if backend == "file":
        return JsonItemRepository(app.config["DATA_FILE"])
    if backend == "sql":
        from inventory.db import init_db
        from inventory.repositories.sql_item_repository import SqlItemRepository

        session_factory = init_db(app)
        return SqlItemRepository(session_factory, schema_ready=bool(app.extensions["schema_ready"]))
    raise ValueError(f"Unknown STORAGE_BACKEND {backend!r} (expected one of {', '.join(BACKENDS)})")


def init_services(app: Flask) -> ItemService:
    photos = PhotoStore(app.config["CACHE_DIR"])
    service = ItemService(build_repository(app), photos)

    app.extensions["photo_store"] = photos
    app.extensions["item_service"] = service
    logger.info(
        "Inventory storage ready (backend=%s, cache=%s)",
        app.config.get("STORAGE_BACKEND"),
        photos.root,
    )
    return service


def get_item_service() -> ItemService:
    """Get the item service of the current application."""

    service: ItemService | None = current_app.extensions.get("item_service")
    if service is None:
        raise RuntimeError("Item service not initialized")
    return service
