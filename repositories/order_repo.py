"""
repositories/order_repo.py
--------------------------
Data access layers for orders and their line items.
An order's createdAt is fixed when the order is created.
"""

from db.query_builder import ColumnMapper
from repositories.base_repo import BaseRepository


class OrderRepository(BaseRepository):
    """Repository for CRUD operations on the orders table."""

    table = "orders"
    entity = "order"
    fields = ("id", "customerId", "addressId", "createdAt", "deliveredStatus")
    immutable_fields = ("createdAt",)
    columns = ColumnMapper({
        "customerId": "customer_id",
        "addressId": "address_id",
        "createdAt": "created_at",
        "deliveredStatus": "delivered_status",
    })


class OrderLineItemRepository(BaseRepository):
    """
    Repository for CRUD operations on the order_line_items table.

    Rows expose the primary key as `itemId`.
    """

    table = "order_line_items"
    entity = "order line item"
    fields = ("itemId", "orderId", "productId", "quantity", "createdAt")
    id_field = "itemId"
    columns = ColumnMapper({
        "itemId": "id",
        "orderId": "order_id",
        "productId": "product_id",
        "createdAt": "created_at",
    })

    def for_order(self, order_id: int) -> list[dict]:
        """All line items of one order, oldest first."""
        return self.find({"orderId": order_id})
