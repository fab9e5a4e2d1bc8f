"""ORM models."""

from inventory.models.item import ItemRow

__all__ = ["ItemRow"]
