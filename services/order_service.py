"""
services/order_service.py
-------------------------
Order intake: turns an order payload into an order row with its line items.

Two intake paths end in the same result:
    - known customer/address: create the order, then one line item per product
    - inline customer info: create the customer, register (or reuse) the
      address, then continue as above

None of the steps share a transaction. If a line item fails, the order and
the items that were created stay in place and PartialOrderError tells the
caller what happened.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from config import DEFAULT_DELIVERED_STATUS
from db.executor import QueryExecutor
from errors import NotFoundError, PartialOrderError
from models.order_request import (
    CustomerInfo,
    KnownCustomerOrder,
    parse_order_request,
)
from repositories.address_repo import AddressRepository
from repositories.customer_repo import CustomerRepository
from repositories.order_repo import OrderLineItemRepository, OrderRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """
    Handles order intake and line-item management.

    Responsibilities:
        - Dispatch an intake payload to the right creation path.
        - Stamp an order and all of its line items with one timestamp.
        - Add and remove line items of existing orders.
    """

    def __init__(self, executor: QueryExecutor):
        self.customers = CustomerRepository(executor)
        self.addresses = AddressRepository(executor)
        self.orders = OrderRepository(executor)
        self.line_items = OrderLineItemRepository(executor)

    def receive_order(self, payload: dict) -> dict:
        """
        Create an order from an intake payload.

        The payload is fully checked before anything is written, and the
        creation timestamp is taken once here for the order and every item.

        Returns:
            The order row with an `items` dict keyed by item id.

        Raises:
            MalformedRequestError: If the payload has neither accepted shape.
            PartialOrderError: If some line items could not be created.
        """
        request = parse_order_request(payload)
        created_at = _now()

        if isinstance(request, KnownCustomerOrder):
            return self.create_order(
                request.customer_id, request.address_id, request.products, created_at
            )
        return self.create_customer_and_order(
            request.customer_info, request.products, created_at
        )

    def create_order(
        self,
        customer_id: Any,
        address_id: Any,
        products: dict,
        created_at: Optional[datetime] = None,
    ) -> dict:
        """
        Create an order for an existing customer and address.

        Args:
            customer_id: Customer placing the order.
            address_id: Shipping address.
            products: {product_id: quantity}.
            created_at: Shared timestamp; taken now when omitted.
        """
        created_at = created_at or _now()
        order = self.orders.insert({
            "customerId": customer_id,
            "addressId": address_id,
            "createdAt": created_at,
            "deliveredStatus": DEFAULT_DELIVERED_STATUS,
        })
        logger.info(f"Created order #{order['id']} for customer {customer_id}")

        try:
            order["items"] = self._create_items(order["id"], products, created_at)
        except PartialOrderError as e:
            order["items"] = e.items
            e.order = order
            raise
        return order

    def create_customer_and_order(
        self,
        customer_info: CustomerInfo,
        products: dict,
        created_at: Optional[datetime] = None,
    ) -> dict:
        """Create the customer, register the address, then create the order."""
        customer = self.customers.insert(customer_info.customer_fields())
        address = self.addresses.register(customer_info.address_fields(customer["id"]))
        return self.create_order(customer["id"], address["id"], products, created_at)

    def get_order(self, order_id: int) -> dict:
        """Fetch an order with its line items attached."""
        order = self.orders.get(order_id)
        order["items"] = {
            item["itemId"]: item for item in self.line_items.for_order(order_id)
        }
        return order

    # ── LINE ITEMS ────────────────────────────────────────

    def add_item(
        self,
        order_id: int,
        product_id: Any,
        quantity: int,
        created_at: Optional[datetime] = None,
    ) -> dict:
        """
        Add one line item to an existing order.

        Raises:
            NotFoundError: If the order does not exist.
        """
        self._ensure_order(order_id)
        return self._insert_item(order_id, product_id, quantity, created_at or _now())

    def add_items(
        self,
        order_id: int,
        products: dict,
        created_at: Optional[datetime] = None,
    ) -> dict[int, dict]:
        """
        Add one line item per product to an existing order.

        Returns:
            Created line items keyed by item id.

        Raises:
            NotFoundError: If the order does not exist.
            PartialOrderError: If some line items could not be created.
        """
        self._ensure_order(order_id)
        return self._create_items(order_id, products, created_at or _now())

    def remove_item(self, item_id: int) -> None:
        """Delete a line item; NotFoundError if it does not exist."""
        self.line_items.remove(item_id)

    # ── HELPERS ───────────────────────────────────────────

    def _ensure_order(self, order_id: int) -> None:
        if not self.orders.exists(order_id):
            raise NotFoundError(f"Unknown order id: {order_id}")

    def _insert_item(
        self, order_id: int, product_id: Any, quantity: int, created_at: datetime
    ) -> dict:
        return self.line_items.insert({
            "orderId": order_id,
            "productId": product_id,
            "quantity": quantity,
            "createdAt": created_at,
        })

    def _create_items(
        self, order_id: int, products: dict, created_at: datetime
    ) -> dict[int, dict]:
        """
        Insert every line item independently.

        Every product is attempted even after a failure; created items are
        kept.
        """
        items: dict[int, dict] = {}
        failures: dict[Any, Exception] = {}
        for product_id, quantity in products.items():
            try:
                item = self._insert_item(order_id, product_id, quantity, created_at)
            except Exception as e:
                logger.error(f"Failed to add product {product_id} to order #{order_id}: {e}")
                failures[product_id] = e
                continue
            items[item["itemId"]] = item

        if failures:
            raise PartialOrderError(order_id, items, failures) from next(iter(failures.values()))
        return items
