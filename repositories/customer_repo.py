"""
repositories/customer_repo.py
-----------------------------
Data access layer for customers.
Customers are never deduplicated: every insert creates a new row.
"""

from db.query_builder import ColumnMapper
from repositories.base_repo import BaseRepository


class CustomerRepository(BaseRepository):
    """Repository for CRUD operations on the customers table."""

    table = "customers"
    entity = "customer"
    fields = ("id", "firstName", "lastName", "email", "phone", "createdAt")
    columns = ColumnMapper({
        "firstName": "first_name",
        "lastName": "last_name",
        "createdAt": "created_at",
    })
