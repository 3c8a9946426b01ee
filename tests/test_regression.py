from logitrack import crud, models, schemas


def test_fresh_items_are_appended_not_merged(db_session, cache):
    # New items have no id yet, so add_item never folds them together
    order = crud.create_order(
        db_session,
        cache,
        schemas.OrderCreate(
            customer_name="Acme",
            items=[
                schemas.OrderItemCreate(name="Box", quantity=5, location="A1"),
                schemas.OrderItemCreate(name="Box", quantity=3, location="A1"),
            ],
        ),
    )
    assert [i.quantity for i in order.items] == [5, 3]


def test_add_item_merges_persisted_item_by_id(db_session):
    order = models.Order(customer_name="Acme")
    order.add_item(models.InventoryItem(name="Box", quantity=5, location="A1"))
    db_session.add(order)
    db_session.commit()
    existing = order.items[0]

    order.add_item(models.InventoryItem(id=existing.id, name="Box", quantity=2, location="A1"))
    assert len(order.items) == 1
    assert order.items[0].quantity == 7


def test_order_summary_format(db_session):
    from datetime import datetime

    order = models.Order(customer_name="Acme", date_placed=datetime(2024, 2, 9, 15, 0))
    order.add_item(models.InventoryItem(name="Box", quantity=1, location=""))
    db_session.add(order)
    db_session.commit()
    assert order.summary() == f"Order #{order.id} for Acme | Items: 1 | Placed: 02/09/2024"


def test_order_create_leaves_inventory_list_cached(db_session, cache):
    # Only inventory writes invalidate the inventory list
    crud.list_inventory(db_session, cache)
    crud.create_order(
        db_session,
        cache,
        schemas.OrderCreate(customer_name="Acme", items=[schemas.OrderItemCreate(name="Box", quantity=1)]),
    )
    result = crud.list_inventory(db_session, cache)
    assert result.cache_hit is True
    assert result.value == []


def test_remove_item_detaches_from_order(db_session):
    order = models.Order(customer_name="Acme")
    order.add_item(models.InventoryItem(name="Box", quantity=5, location="A1"))
    order.add_item(models.InventoryItem(name="Bag", quantity=1, location="A2"))
    db_session.add(order)
    db_session.commit()
    box, bag = order.items

    assert order.remove_item(box.id) is True
    assert order.remove_item(9999) is False
    db_session.commit()

    assert [i.id for i in order.items] == [bag.id]
    db_session.refresh(box)
    assert box.order_id is None
