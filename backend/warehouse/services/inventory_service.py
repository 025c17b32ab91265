# Overview: Service-layer operations for inventory items; encapsulates business logic and database work.

"""
Inventory invariants (authoritative)

- Every read and write is scoped to the owning user. Another user's item is
  reported exactly like a missing one (NotFoundError).
- Item.quantity is a stored on-hand count and may never go negative.
- Stock adjustments only add (delta >= 0); stock leaves through sales.
- After any change that leaves quantity below LOW_STOCK_THRESHOLD, a
  low-stock alert is dispatched (best-effort, after commit).
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Item
from ..validation import MAX_QUANTITY, MAX_RECORD_ID, NotFoundError, ValidationError, parse_stock_delta
from . import notification_service
from .concurrency import lock_for_update
from warehouse.time_utils import utcnow


def is_low_stock(item: Item) -> bool:
    return item.quantity < current_app.config["LOW_STOCK_THRESHOLD"]


def alert_if_low_stock(item: Item) -> bool:
    """Dispatch a low-stock alert when needed. Returns True if one was sent."""
    if not is_low_stock(item):
        return False
    return notification_service.notify(notification_service.send_low_stock_alert, item.user, item)


def get_owned_item(owner_id: int, item_id: int, *, lock: bool = False, session=None) -> Item:
    if not 0 < item_id <= MAX_RECORD_ID:
        raise NotFoundError("Item not found")
    session = session if session is not None else db.session
    query = session.query(Item).filter_by(id=item_id, user_id=owner_id)
    if lock:
        query = lock_for_update(query)
    item = query.first()
    if item is None:
        raise NotFoundError("Item not found")
    return item


def list_items(owner_id: int) -> list[Item]:
    """Caller's items, newest first."""
    return (
        db.session.query(Item)
        .filter_by(user_id=owner_id)
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )


def create_item(owner_id: int, *, name: str, quantity: int = 0, price: float = 0.0) -> Item:
    item = Item(user_id=owner_id, name=name, quantity=quantity, price=price)
    db.session.add(item)
    db.session.commit()
    return item


def delete_item(owner_id: int, item_id: int) -> None:
    """
    Delete an owned item. Its sales stay on record with item_id cleared.
    """
    item = get_owned_item(owner_id, item_id)
    db.session.delete(item)
    db.session.commit()


def adjust_stock(owner_id: int, item_id: int, delta) -> Item:
    """
    Add ``delta`` units to an owned item.

    The increment is applied in SQL (quantity = quantity + delta) so
    concurrent adjustments never overwrite each other.

    Raises:
        ValidationError: delta is not a non-negative whole number, or the
            result would exceed MAX_QUANTITY
        NotFoundError: item missing or not owned by the caller
    """
    delta = parse_stock_delta(delta)
    item = get_owned_item(owner_id, item_id)

    if item.quantity + delta > MAX_QUANTITY:
        raise ValidationError("Invalid quantity")

    item.quantity = Item.quantity + delta
    item.updated_at = utcnow()
    db.session.commit()

    # Attributes expired on commit; this reloads the stored quantity
    current_app.logger.info("Stock adjusted: item=%s delta=%s quantity=%s", item.id, delta, item.quantity)
    alert_if_low_stock(item)
    return item
