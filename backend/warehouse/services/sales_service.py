"""
Sales Service - stock-checked sale recording

A sale is one transactional unit of work:

1. read the owned item under a write lock
2. check that stock covers the requested quantity
3. decrement stock with a guarded UPDATE (quantity >= requested)
4. insert the sale with total_amount = quantity * item.price
5. commit both writes together

Any failure rolls back every write. Notifications go out only after commit
and cannot undo the sale.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..models import Item, Sale
from ..validation import ConflictError, parse_record_id, parse_sale_quantity
from . import notification_service
from .concurrency import UnitOfWork, run_with_retry
from .inventory_service import alert_if_low_stock, get_owned_item
from warehouse.time_utils import utcnow


class InsufficientStockError(ConflictError):
    """Requested quantity exceeds stock on hand. Nothing was written."""
    pass


def _insufficient(item_id: int, requested: int, available: int) -> InsufficientStockError:
    return InsufficientStockError(
        "Insufficient quantity",
        details={
            "item_id": item_id,
            "requested_quantity": requested,
            "available": available,
        },
    )


def _decrement_stock(session, owner_id: int, item_id: int, quantity: int) -> bool:
    """
    Guarded decrement. Returns False when another transaction took the stock
    between our read and this write.
    """
    result = session.execute(
        update(Item)
        .where(
            Item.id == item_id,
            Item.user_id == owner_id,
            Item.quantity >= quantity,
        )
        .values(quantity=Item.quantity - quantity, updated_at=utcnow()),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount == 1


def record_sale(
    owner_id: int,
    item_id,
    quantity,
    *,
    unit_of_work: UnitOfWork | None = None,
) -> tuple[Sale, Item]:
    """
    Record a sale of ``quantity`` units of an owned item.

    Returns (sale, updated_item).

    Raises:
        ValidationError: item_id / quantity malformed
        NotFoundError: item missing or owned by someone else
        InsufficientStockError: stock on hand < quantity
    """
    item_id = parse_record_id(item_id, "itemId")
    quantity = parse_sale_quantity(quantity)
    uow = unit_of_work if unit_of_work is not None else UnitOfWork()
    session = uow.session

    def _op():
        with uow:
            item = get_owned_item(owner_id, item_id, lock=True, session=session)

            if item.quantity < quantity:
                raise _insufficient(item.id, quantity, item.quantity)

            unit_price = item.price
            if not _decrement_stock(session, owner_id, item.id, quantity):
                session.refresh(item)
                raise _insufficient(item.id, quantity, item.quantity)

            sale = Sale(
                user_id=owner_id,
                item_id=item.id,
                quantity=quantity,
                total_amount=quantity * unit_price,
                created_at=utcnow(),
            )
            session.add(sale)
            uow.commit()
        return sale, item

    sale, item = run_with_retry(_op, session=session)

    # Post-commit side effects; item attributes reload from the committed row
    current_app.logger.info(
        "Sale recorded: sale=%s item=%s quantity=%s remaining=%s",
        sale.id, item.id, sale.quantity, item.quantity,
    )
    notification_service.notify(notification_service.send_sale_notification, item.user, sale, item)
    alert_if_low_stock(item)

    return sale, item
