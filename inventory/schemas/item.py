"""Marshmallow schemas for inventory items."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class ItemSchema(Schema):
    """Serialize an item for clients. Exposes the photo URL, never the raw key."""

    id = fields.Str(required=True)
    inventory_name = fields.Str(required=True)
    description = fields.Str()
    photo_url = fields.Str(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class ItemRegisterSchema(Schema):
    """Validate the multipart register form (the photo file is read separately)."""

    class Meta:
        unknown = EXCLUDE

    # Emptiness is checked by the service so every caller gets the same error.
    inventory_name = fields.Str(load_default="")
    description = fields.Str(load_default="")


class ItemUpdateSchema(Schema):
    """Validate a partial update payload."""

    class Meta:
        unknown = EXCLUDE

    inventory_name = fields.Str(load_default=None, allow_none=True)
    description = fields.Str(load_default=None, allow_none=True)


class ItemSearchSchema(Schema):
    """Validate a search-by-id payload."""

    class Meta:
        unknown = EXCLUDE

    id = fields.Str(required=True)
    has_photo = fields.Boolean(load_default=False)
