"""Inventory routes (controllers). No business logic here."""

from __future__ import annotations

import mimetypes
from typing import Any

from flask import Blueprint, request, send_file, url_for
from werkzeug.datastructures import FileStorage

from inventory.dependencies import get_item_service
from inventory.repositories.item_repository import ItemRecord
from inventory.schemas.item import (
    ItemRegisterSchema,
    ItemSchema,
    ItemSearchSchema,
    ItemUpdateSchema,
)
from inventory.services.item_service import with_photo_note
from inventory.storage.photo_store import PhotoUpload
from inventory.utils.responses import ok

inventory_bp = Blueprint("inventory", __name__)

_item_schema = ItemSchema()
_register_schema = ItemRegisterSchema()
_update_schema = ItemUpdateSchema()
_search_schema = ItemSearchSchema()


def _photo_url(item: ItemRecord) -> str | None:
    if not item.photo:
        return None
    return url_for("inventory.get_photo", item_id=item.id, _external=True)


def _present(item: ItemRecord) -> dict[str, Any]:
    return _item_schema.dump(
        {
            "id": item.id,
            "inventory_name": item.inventory_name,
            "description": item.description,
            "photo_url": _photo_url(item),
            "created_at": item.created_at,
        }
    )


def _uploaded_photo() -> PhotoUpload | None:
    file: FileStorage | None = request.files.get("photo")
    if file is None or not file.filename:
        return None
    return PhotoUpload(stream=file.stream, filename=file.filename)


@inventory_bp.post("/register")
def register_item():
    """Register a new item from a multipart form."""

    data = _register_schema.load(request.form.to_dict())
    item = get_item_service().create_item(
        data["inventory_name"],
        data["description"],
        photo=_uploaded_photo(),
    )
    return ok(_present(item), status_code=201)


@inventory_bp.get("/inventory")
def list_items():
    items = get_item_service().list_items()
    return ok([_present(item) for item in items])


@inventory_bp.get("/inventory/<item_id>")
def get_item(item_id: str):
    return ok(_present(get_item_service().get_item(item_id)))


@inventory_bp.put("/inventory/<item_id>")
def update_item(item_id: str):
    """Partially update name and/or description."""

    payload = request.get_json(silent=True) or {}
    data = _update_schema.load(payload)
    item = get_item_service().update_item(
        item_id,
        name=data["inventory_name"],
        description=data["description"],
    )
    return ok(_present(item))


@inventory_bp.delete("/inventory/<item_id>")
def delete_item(item_id: str):
    get_item_service().delete_item(item_id)
    return ok({"message": "Deleted", "id": item_id})


@inventory_bp.get("/inventory/<item_id>/photo")
def get_photo(item_id: str):
    """Stream the item's photo."""

    handle, key = get_item_service().open_photo(item_id)
    mimetype = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return send_file(handle, mimetype=mimetype, download_name=key)


@inventory_bp.put("/inventory/<item_id>/photo")
def replace_photo(item_id: str):
    item = get_item_service().replace_photo(item_id, _uploaded_photo())
    return ok(_present(item))


@inventory_bp.post("/search")
def search_item():
    """Exact lookup by id; ``has_photo`` appends the photo URL to the description."""

    payload = request.get_json(silent=True) or request.form.to_dict()
    data = _search_schema.load(payload)
    item = get_item_service().find_item(data["id"])
    if data["has_photo"]:
        item = with_photo_note(item, _photo_url(item))
    return ok(_present(item))
