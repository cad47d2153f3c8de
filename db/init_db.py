"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Customers: one row per person placing orders (never deduplicated)
CREATE TABLE IF NOT EXISTS customers (
    id              SERIAL PRIMARY KEY,
    first_name      VARCHAR(100),
    last_name       VARCHAR(100),
    email           VARCHAR(255),
    phone           VARCHAR(30),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Shipping addresses: deduplicated by value in AddressRepository.register,
-- deliberately without a UNIQUE constraint over the identity columns
CREATE TABLE IF NOT EXISTS shipping_addresses (
    id                  SERIAL PRIMARY KEY,
    country             VARCHAR(100),
    state               VARCHAR(100),
    city                VARCHAR(100),
    shipping_address    TEXT NOT NULL,
    address_type        VARCHAR(30),
    postal_code         VARCHAR(20),
    customer_id         INT REFERENCES customers(id)
);

-- Products: catalog entries
CREATE TABLE IF NOT EXISTS products (
    id              SERIAL PRIMARY KEY,
    name            VARCHAR(200) NOT NULL,
    published       BOOLEAN DEFAULT TRUE,
    description     TEXT,
    price           NUMERIC(12,2),
    variant_sku     VARCHAR(100),
    image_source    TEXT
);

-- Orders: created_at is fixed at creation
CREATE TABLE IF NOT EXISTS orders (
    id                  SERIAL PRIMARY KEY,
    customer_id         INT REFERENCES customers(id),
    address_id          INT REFERENCES shipping_addresses(id),
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    delivered_status    VARCHAR(30) NOT NULL DEFAULT 'notDelivered'
);

-- Order line items: one row per product in an order
CREATE TABLE IF NOT EXISTS order_line_items (
    id              SERIAL PRIMARY KEY,
    order_id        INT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    product_id      INT NOT NULL REFERENCES products(id),
    quantity        INT NOT NULL CHECK (quantity > 0),
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Users: login accounts, each linked to a customer record
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    username        VARCHAR(50) UNIQUE NOT NULL,
    password        TEXT NOT NULL,
    first_name      VARCHAR(100),
    last_name       VARCHAR(100),
    email           VARCHAR(255),
    phone           VARCHAR(30),
    customer_id     INT REFERENCES customers(id),
    is_admin        BOOLEAN DEFAULT FALSE
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_addresses_customer ON shipping_addresses(customer_id);
CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders(customer_id);
CREATE INDEX IF NOT EXISTS idx_line_items_order ON order_line_items(order_id);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    logger.info("Order backend schema is ready.")
