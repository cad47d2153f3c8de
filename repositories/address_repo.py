"""
repositories/address_repo.py
----------------------------
Data access layer for shipping addresses.

Addresses are registered by value: registering the same seven identifying
fields twice returns the first row instead of inserting a second one.
The lookup and the insert are two separate statements, so two concurrent
registrations of the same address can still both insert.
"""

from collections.abc import Mapping
from typing import Any

from db.query_builder import ColumnMapper
from repositories.base_repo import BaseRepository
from utils.logger import get_logger

logger = get_logger(__name__)

IDENTITY_FIELDS = (
    "country",
    "state",
    "city",
    "street",
    "addressType",
    "postalCode",
    "customerId",
)


class AddressRepository(BaseRepository):
    """Repository for CRUD operations on the shipping_addresses table."""

    table = "shipping_addresses"
    entity = "address"
    fields = ("id", *IDENTITY_FIELDS)
    columns = ColumnMapper({
        "street": "shipping_address",
        "addressType": "address_type",
        "postalCode": "postal_code",
        "customerId": "customer_id",
    })

    def register(self, fields: Mapping[str, Any]) -> dict:
        """
        Return the address matching all identifying fields, creating it if needed.

        Missing identifying fields count as None and match a NULL column.

        Args:
            fields: Address fields; keys outside IDENTITY_FIELDS are rejected.

        Returns:
            The existing row when one matches, else the newly inserted row.
        """
        self._check_fields(fields)
        identity = [(field, fields.get(field)) for field in IDENTITY_FIELDS]

        matches = self._select_where(identity, null_safe=True)
        if matches:
            address = matches[0]
            logger.info(f"Reusing address #{address['id']} for customer {address['customerId']}")
            return address

        return self.insert(identity)
