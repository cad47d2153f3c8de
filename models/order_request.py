"""
models/order_request.py
-----------------------
Typed forms of the two accepted order-intake payloads.

    {"customerId": 1, "addressId": 1, "products": {"7": 2}}
        -> KnownCustomerOrder

    {"customerInfo": {"firstName": ..., "street": ..., ...}, "products": {"7": 2}}
        -> NewCustomerOrder

A payload carrying both customerId and addressId is always a
KnownCustomerOrder, even when it also carries customerInfo.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from errors import MalformedRequestError


@dataclass
class CustomerInfo:
    """
    Contact and shipping details of a customer placing their first order.

    Attributes:
        first_name, last_name, email, phone: Customer contact fields.
        street, city, state, country, address_type, postal_code: Shipping
            address fields.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    address_type: Optional[str] = None
    postal_code: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CustomerInfo":
        postal_code = data.get("postalCode")
        return cls(
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            email=data.get("email"),
            phone=data.get("phone"),
            street=data.get("street"),
            city=data.get("city"),
            state=data.get("state"),
            country=data.get("country"),
            address_type=data.get("addressType"),
            postal_code=str(postal_code) if postal_code is not None else None,
        )

    def customer_fields(self) -> dict:
        """Sparse Customer field-set (unset contact fields are left out)."""
        values = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }
        return {name: value for name, value in values.items() if value is not None}

    def address_fields(self, customer_id: int) -> dict:
        """All identifying Address fields for the given customer."""
        return {
            "country": self.country,
            "state": self.state,
            "city": self.city,
            "street": self.street,
            "addressType": self.address_type,
            "postalCode": self.postal_code,
            "customerId": customer_id,
        }


@dataclass
class KnownCustomerOrder:
    """Order for a customer and address that already exist."""
    customer_id: Any
    address_id: Any
    products: dict = field(default_factory=dict)


@dataclass
class NewCustomerOrder:
    """Order that first creates its customer and registers the address."""
    customer_info: CustomerInfo
    products: dict


OrderRequest = Union[KnownCustomerOrder, NewCustomerOrder]


def parse_order_request(payload: Any) -> OrderRequest:
    """
    Work out which intake path a payload takes.

    Raises:
        MalformedRequestError: If the payload matches neither shape, or
            `products`/`customerInfo` are not objects.
    """
    if not isinstance(payload, Mapping):
        raise MalformedRequestError("Order payload must be an object")

    products = payload.get("products")
    if products is not None and not isinstance(products, Mapping):
        raise MalformedRequestError("products must map product ids to quantities")

    if payload.get("customerId") is not None and payload.get("addressId") is not None:
        return KnownCustomerOrder(
            customer_id=payload["customerId"],
            address_id=payload["addressId"],
            products=dict(products or {}),
        )

    customer_info = payload.get("customerInfo")
    if customer_info is not None and products is not None:
        if not isinstance(customer_info, Mapping):
            raise MalformedRequestError("customerInfo must be an object")
        return NewCustomerOrder(
            customer_info=CustomerInfo.from_payload(customer_info),
            products=dict(products),
        )

    raise MalformedRequestError(
        "Order payload needs customerId and addressId, or customerInfo and products"
    )
