"""
Migration V1 -> V2
- Creates the 'orders' table (and its customer_name index) if missing
- Adds nullable 'order_id' to inventory_items, referencing orders with ON DELETE SET NULL
- Existing stock rows stay unattached (order_id NULL)

Usage:
  python -m migration.migration_v1_to_v2 --db path/to/logitrack.db
"""
import argparse
import logging
import os
import sqlite3
from contextlib import closing

logger = logging.getLogger(__name__)


def has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    cur = conn.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())


def migrate(db_path: str):
    if db_path == ":memory:":
        raise ValueError("Use a file-backed DB for migration script")

    if not os.path.exists(db_path):
        raise FileNotFoundError(db_path)

    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("PRAGMA foreign_keys=ON")

        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        if "inventory_items" not in tables:
            raise RuntimeError("inventory_items table missing; cannot migrate")

        if "orders" not in tables:
            conn.execute(
                "CREATE TABLE orders ("
                "id INTEGER PRIMARY KEY, "
                "customer_name VARCHAR NOT NULL, "
                "date_placed DATETIME NOT NULL)"
            )
            logger.info("created orders table")
        conn.execute("CREATE INDEX IF NOT EXISTS ix_orders_customer_name ON orders (customer_name)")

        if not has_column(conn, "inventory_items", "order_id"):
            conn.execute(
                "ALTER TABLE inventory_items ADD COLUMN order_id INTEGER "
                "REFERENCES orders(id) ON DELETE SET NULL"
            )
            logger.info("added inventory_items.order_id")
        conn.execute("CREATE INDEX IF NOT EXISTS ix_inventory_items_order_id ON inventory_items (order_id)")
        conn.commit()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", required=True, help="Path to SQLite database file")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    migrate(args.db)

if __name__ == "__main__":
    main()
