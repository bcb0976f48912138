# Models
from order_notes.db.base import Base
from .note import Note
from .product import Product

__all__ = [
    "Base",
    "Note",
    "Product",
]
