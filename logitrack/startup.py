"""Work that must finish before the service takes traffic: schema, roles, seed data."""
import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from . import accounts, models
from .auth import MANAGER_ROLE
from .config import Settings
from .db import Base

logger = logging.getLogger(__name__)

SEED_ITEM = {"name": "Pallet Jack", "quantity": 12, "location": "Warehouse A"}


def run_migrations(engine: Engine) -> None:
    # Create tables if not existing. Pre-orders SQLite files lack inventory_items.order_id
    Base.metadata.create_all(bind=engine)
    columns = {col["name"] for col in inspect(engine).get_columns("inventory_items")}
    if "order_id" not in columns:
        with engine.begin() as conn:
            conn.execute(text(
                "ALTER TABLE inventory_items ADD COLUMN order_id INTEGER "
                "REFERENCES orders(id) ON DELETE SET NULL"
            ))
        logger.info("added inventory_items.order_id")


def ensure_manager(db: Session, settings: Settings) -> models.User:
    role = accounts.ensure_role(db, MANAGER_ROLE)
    db.commit()
    manager = accounts.find_by_email(db, settings.manager_email)
    if manager is None:
        manager = accounts.create_user(db, settings.manager_email, settings.manager_password, roles=[MANAGER_ROLE])
        logger.info("seeded manager account %s", settings.manager_email)
    elif role not in manager.roles:
        manager.roles.append(role)
        db.commit()
    return manager


def seed_inventory(db: Session) -> None:
    if db.query(models.InventoryItem).first() is None:
        db.add(models.InventoryItem(**SEED_ITEM))
        db.commit()
        logger.info("seeded inventory with %s", SEED_ITEM["name"])


def initialize(db: Session, settings: Settings) -> None:
    run_migrations(db.get_bind())
    ensure_manager(db, settings)
    seed_inventory(db)
