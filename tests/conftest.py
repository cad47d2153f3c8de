"""
Shared pytest fixtures for all tests.

`executor` is an in-memory SQLite executor honouring the same contract as
PostgresExecutor (`$n` placeholders in, list of dicts out), so repositories
and services run real statements without a PostgreSQL server.
"""

import re
import sqlite3
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from errors import ConflictError
from repositories.address_repo import AddressRepository
from repositories.customer_repo import CustomerRepository
from repositories.order_repo import OrderLineItemRepository, OrderRepository
from repositories.product_repo import ProductRepository
from services.order_service import OrderService

SQLITE_SCHEMA = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name TEXT,
    last_name TEXT,
    email TEXT,
    phone TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE shipping_addresses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    country TEXT,
    state TEXT,
    city TEXT,
    shipping_address TEXT NOT NULL,
    address_type TEXT,
    postal_code TEXT,
    customer_id INTEGER
);
CREATE TABLE products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    published BOOLEAN DEFAULT 1,
    description TEXT,
    price NUMERIC,
    variant_sku TEXT,
    image_source TEXT
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id INTEGER,
    address_id INTEGER,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    delivered_status TEXT NOT NULL DEFAULT 'notDelivered'
);
CREATE TABLE order_line_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id INTEGER NOT NULL,
    product_id INTEGER NOT NULL,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    first_name TEXT,
    last_name TEXT,
    email TEXT,
    phone TEXT,
    customer_id INTEGER,
    is_admin BOOLEAN DEFAULT 0
);
"""


class SQLiteExecutor:
    """In-memory executor that records every statement it runs."""

    def __init__(self):
        self.conn = sqlite3.connect(":memory:")
        self.conn.executescript(SQLITE_SCHEMA)
        self.statements: list[tuple[str, list]] = []

    def execute(self, sql, params=()):
        self.statements.append((sql, list(params)))
        query = re.sub(r"\$(\d+)", r"?\1", sql)
        values = [v.isoformat() if isinstance(v, datetime) else v for v in params]
        try:
            cur = self.conn.execute(query, values)
            rows = cur.fetchall()
            columns = [c[0] for c in cur.description] if cur.description else []
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            if "UNIQUE" in str(e):
                raise ConflictError(str(e)) from e
            raise
        return [dict(zip(columns, row)) for row in rows]

    def writes(self) -> list[str]:
        """Statements other than SELECTs."""
        return [sql for sql, _ in self.statements if not sql.lstrip().startswith("SELECT")]

    def count(self, table: str) -> int:
        return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


# ============================================================================
# EXECUTOR FIXTURES
# ============================================================================


@pytest.fixture
def executor() -> SQLiteExecutor:
    """Fresh in-memory database per test."""
    executor = SQLiteExecutor()
    yield executor
    executor.conn.close()


@pytest.fixture
def mock_executor() -> MagicMock:
    """Executor mock returning no rows unless configured otherwise."""
    mock = MagicMock()
    mock.execute.return_value = []
    return mock


# ============================================================================
# REPOSITORY / SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def customers(executor) -> CustomerRepository:
    return CustomerRepository(executor)


@pytest.fixture
def addresses(executor) -> AddressRepository:
    return AddressRepository(executor)


@pytest.fixture
def products(executor) -> ProductRepository:
    return ProductRepository(executor)


@pytest.fixture
def orders(executor) -> OrderRepository:
    return OrderRepository(executor)


@pytest.fixture
def line_items(executor) -> OrderLineItemRepository:
    return OrderLineItemRepository(executor)


@pytest.fixture
def order_service(executor) -> OrderService:
    return OrderService(executor)


@pytest.fixture
def address_fields() -> dict:
    """All seven identifying address fields."""
    return {
        "country": "United States of America",
        "state": "Missouri",
        "city": "Joplin",
        "street": "123 Fake Street",
        "addressType": "home",
        "postalCode": "12345",
        "customerId": 1,
    }


@pytest.fixture
def customer_info() -> dict:
    """Inline customer payload as sent by the checkout form."""
    return {
        "firstName": "Testy",
        "lastName": "Test",
        "email": "test@mail.com",
        "phone": "5555555555",
        "street": "123 Fake Street",
        "city": "Joplin",
        "state": "Missouri",
        "country": "United States of America",
        "postalCode": 12345,
        "addressType": "home",
    }
