import os
import sqlite3
import tempfile

import pytest

from migration.migration_v1_to_v2 import migrate


def create_v1_db(path: str):
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            "CREATE TABLE inventory_items (id INTEGER PRIMARY KEY, name TEXT NOT NULL, quantity INTEGER NOT NULL, location TEXT NOT NULL)"
        )
        # Seed data
        conn.execute("INSERT INTO inventory_items (name, quantity, location) VALUES ('Pallet Jack', 12, 'Warehouse A'), ('Tape', 40, 'B2')")
        conn.commit()
    finally:
        conn.close()


def test_migration_adds_orders_and_detached_items():
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "test.db")
        create_v1_db(db_path)

        # Run migration, twice to check it is idempotent
        migrate(db_path)
        migrate(db_path)

        conn = sqlite3.connect(db_path)
        try:
            conn.execute("PRAGMA foreign_keys=ON")
            cols = [r[1] for r in conn.execute("PRAGMA table_info(inventory_items)")]
            assert "order_id" in cols

            rows = conn.execute("SELECT name, order_id FROM inventory_items ORDER BY id").fetchall()
            assert rows == [("Pallet Jack", None), ("Tape", None)]

            # ON DELETE SET NULL holds on the migrated schema
            conn.execute("INSERT INTO orders (id, customer_name, date_placed) VALUES (1, 'Acme', '2024-01-01 00:00:00')")
            conn.execute("UPDATE inventory_items SET order_id = 1 WHERE name = 'Tape'")
            conn.execute("DELETE FROM orders WHERE id = 1")
            assert conn.execute("SELECT order_id FROM inventory_items WHERE name = 'Tape'").fetchone() == (None,)
        finally:
            conn.close()


def test_migration_requires_inventory_table():
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "empty.db")
        sqlite3.connect(db_path).close()
        with pytest.raises(RuntimeError):
            migrate(db_path)


def test_migration_rejects_memory_db():
    with pytest.raises(ValueError):
        migrate(":memory:")
