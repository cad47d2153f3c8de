"""
repositories/product_repo.py
----------------------------
Data access layer for catalog products.
"""

from db.query_builder import ColumnMapper, FieldSet, ordered_pairs
from repositories.base_repo import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for CRUD operations on the products table."""

    table = "products"
    entity = "product"
    fields = ("id", "name", "published", "description", "price", "variantSku", "imageSrc")
    columns = ColumnMapper({
        "variantSku": "variant_sku",
        "imageSrc": "image_source",
    })

    def insert(self, fields: FieldSet) -> dict:
        """Insert a product; it is published unless stated otherwise."""
        pairs = ordered_pairs(fields)
        if not any(field == "published" for field, _ in pairs):
            pairs.append(("published", True))
        return super().insert(pairs)
