from datetime import datetime, timezone
from typing import List

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship
from .db import Base


def utcnow() -> datetime:
    # Stored naive; every timestamp in the database is UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False)
    # upper-cased email, used for case-insensitive lookups and uniqueness
    normalized_email = Column(String, nullable=False, unique=True, index=True)
    username = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    email_confirmed = Column(Boolean, nullable=False, default=False)

    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    @property
    def role_names(self) -> List[str]:
        return sorted(role.name for role in self.roles)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String, nullable=False, index=True)
    date_placed = Column(DateTime, nullable=False, default=utcnow)

    # No delete cascade: removing an order nulls items.order_id instead
    items = relationship(
        "InventoryItem",
        back_populates="order",
        order_by="InventoryItem.id",
        passive_deletes=True,
    )

    def add_item(self, item: "InventoryItem") -> None:
        """Append ``item``, or fold its quantity into an already-present item with the same id.

        Items that have not been flushed yet have no id, so they never match
        and are always appended.
        """
        existing = None
        if item.id is not None:
            existing = next((i for i in self.items if i.id == item.id), None)
        if existing is not None:
            existing.quantity += item.quantity
        else:
            self.items.append(item)

    def remove_item(self, item_id: int) -> bool:
        """Drop the item with ``item_id`` from this order; it stays in stock, detached."""
        existing = next((i for i in self.items if i.id == item_id), None)
        if existing is None:
            return False
        self.items.remove(existing)
        return True

    def summary(self) -> str:
        placed = self.date_placed.strftime("%m/%d/%Y") if self.date_placed else "-"
        return f"Order #{self.id} for {self.customer_name} | Items: {len(self.items)} | Placed: {placed}"


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=False, default="")
    # Null for stock items that are not attached to any order
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)

    order = relationship("Order", back_populates="items")

    def describe(self) -> str:
        return f"Item: {self.name} | Quantity: {self.quantity} | Location: {self.location}"
