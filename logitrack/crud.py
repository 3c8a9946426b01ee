import logging
import time
from datetime import datetime, timezone
from typing import Any, List, NamedTuple, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from . import config, models, schemas
from .cache import CacheKey, ReadThroughCache
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


class CachedRead(NamedTuple):
    """A read result plus how it was served.

    ``query_ms`` is set only when the store was actually queried.
    """

    value: Any
    cache_hit: bool
    query_ms: Optional[int] = None


class Stopwatch:
    def __enter__(self):
        self._start = time.perf_counter()
        self.elapsed_ms = 0
        return self

    def __exit__(self, *exc):
        self.elapsed_ms = int((time.perf_counter() - self._start) * 1000)
        return False


def _cache_ttl() -> int:
    return config.get_settings().cache_ttl_seconds


def _to_utc_naive(value: Optional[datetime]) -> datetime:
    if value is None:
        return models.utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# -------------------- Inventory --------------------

def list_inventory(db: Session, cache: ReadThroughCache) -> CachedRead:
    key = CacheKey.inventory_all()
    cached, found = cache.get(key)
    if found:
        return CachedRead(cached, cache_hit=True)

    with Stopwatch() as sw:
        rows = db.query(models.InventoryItem).order_by(models.InventoryItem.id).all()
    items = [schemas.InventoryItemRead.model_validate(row) for row in rows]
    cache.set(key, items, ttl=_cache_ttl(), size=len(items))
    logger.debug("inventory list loaded from store in %d ms (%d items)", sw.elapsed_ms, len(items))
    return CachedRead(items, cache_hit=False, query_ms=sw.elapsed_ms)


def create_inventory_item(db: Session, cache: ReadThroughCache, item: schemas.InventoryItemCreate) -> schemas.InventoryItemRead:
    if not item.name or not item.name.strip():
        raise ValidationError("Name is required.")

    db_item = models.InventoryItem(
        name=item.name.strip(),
        quantity=item.quantity,
        location=(item.location or "").strip(),
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    cache.remove(CacheKey.inventory_all())
    logger.info("created inventory item %d (%s)", db_item.id, db_item.describe())
    return schemas.InventoryItemRead.model_validate(db_item)


def delete_inventory_item(db: Session, cache: ReadThroughCache, item_id: int) -> None:
    db_item = db.get(models.InventoryItem, item_id)
    if not db_item:
        raise NotFound(f"Inventory item {item_id} not found")
    db.delete(db_item)
    db.commit()
    cache.remove(CacheKey.inventory_all())
    logger.info("deleted inventory item %d", item_id)


# -------------------- Orders --------------------

def list_orders(db: Session) -> CachedRead:
    with Stopwatch() as sw:
        rows = (
            db.query(
                models.Order.id,
                models.Order.customer_name,
                models.Order.date_placed,
                func.count(models.InventoryItem.id).label("item_count"),
            )
            .outerjoin(models.InventoryItem, models.InventoryItem.order_id == models.Order.id)
            .group_by(models.Order.id, models.Order.customer_name, models.Order.date_placed)
            .order_by(models.Order.id)
            .all()
        )
    summaries = [schemas.OrderSummary.model_validate(row) for row in rows]
    return CachedRead(summaries, cache_hit=False, query_ms=sw.elapsed_ms)


def _load_order(db: Session, order_id: int) -> Optional[models.Order]:
    return (
        db.query(models.Order)
        .options(selectinload(models.Order.items))
        .filter(models.Order.id == order_id)
        .first()
    )


def get_order(db: Session, cache: ReadThroughCache, order_id: int) -> CachedRead:
    key = CacheKey.order(order_id)
    cached, found = cache.get(key)
    if found:
        return CachedRead(cached, cache_hit=True)

    with Stopwatch() as sw:
        order = _load_order(db, order_id)
    if order is None:
        raise NotFound(f"Order {order_id} not found", headers={"X-Query-MS": str(sw.elapsed_ms)})
    snapshot = schemas.OrderRead.model_validate(order)
    cache.set(key, snapshot, ttl=_cache_ttl())
    return CachedRead(snapshot, cache_hit=False, query_ms=sw.elapsed_ms)


def create_order(db: Session, cache: ReadThroughCache, order: schemas.OrderCreate) -> schemas.OrderRead:
    if not order.customer_name or not order.customer_name.strip():
        raise ValidationError("CustomerName is required.")

    db_order = models.Order(
        customer_name=order.customer_name.strip(),
        date_placed=_to_utc_naive(order.date_placed),
    )
    for line in order.items or []:
        db_order.add_item(
            models.InventoryItem(
                name=line.name.strip(),
                quantity=line.quantity,
                location=(line.location or "").strip(),
            )
        )
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    # Never cached yet; kept so every order write invalidates its own key
    cache.remove(CacheKey.order(db_order.id))
    logger.info("created %s", db_order.summary())
    return schemas.OrderRead.model_validate(db_order)


def delete_order(db: Session, cache: ReadThroughCache, order_id: int) -> None:
    order = _load_order(db, order_id)
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    detached: List[int] = [item.id for item in order.items]
    db.delete(order)
    db.commit()
    cache.remove(CacheKey.order(order_id))
    logger.info("deleted order %d; detached items %s", order_id, detached)
