# Overview: Read-only sales aggregation for reports and daily summaries.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from warehouse.extensions import db
from warehouse.models import Item, Sale
from warehouse.time_utils import day_window, to_utc_z


def _day_expr(column):
    """Calendar day of a UTC timestamp as a 'YYYY-MM-DD' string."""
    dialect = db.session.get_bind().dialect.name
    if dialect == "postgresql":
        return func.to_char(column, "YYYY-MM-DD")
    if dialect in ("mysql", "mariadb"):
        return func.date_format(column, "%Y-%m-%d")
    return func.strftime("%Y-%m-%d", column)


def sales_summary(owner_id: int) -> list[dict]:
    """
    Per-item totals over the caller's sales.

    Sales whose item has since been deleted have no item to name and are
    left out.
    """
    rows = db.session.query(
        Sale.item_id.label("item_id"),
        Item.name.label("item_name"),
        func.coalesce(func.sum(Sale.quantity), 0).label("total_quantity"),
        func.coalesce(func.sum(Sale.total_amount), 0).label("total_amount"),
    ).join(Item, Item.id == Sale.item_id).filter(
        Sale.user_id == owner_id,
    ).group_by(Sale.item_id, Item.name).order_by(Item.name.asc(), Sale.item_id.asc()).all()

    return [
        {
            "item_id": row.item_id,
            "item_name": row.item_name,
            "total_quantity": int(row.total_quantity or 0),
            "total_amount": float(row.total_amount or 0),
        }
        for row in rows
    ]


def sales_trend(owner_id: int) -> list[dict]:
    """Revenue per UTC calendar day, oldest first."""
    day = _day_expr(Sale.created_at)

    rows = db.session.query(
        day.label("day"),
        func.coalesce(func.sum(Sale.total_amount), 0).label("total_sales"),
    ).filter(
        Sale.user_id == owner_id,
    ).group_by(day).order_by(day.asc()).all()

    return [
        {
            "date": row.day,
            "total_sales": float(row.total_sales or 0),
        }
        for row in rows
    ]


def sales_for_day(owner_id: int, day: date) -> list[dict]:
    """
    The caller's individual sales within [day 00:00, next day 00:00) UTC,
    oldest first, with item names (None for deleted items).
    """
    start, end = day_window(day)

    rows = db.session.query(Sale, Item.name).outerjoin(
        Item, Item.id == Sale.item_id
    ).filter(
        Sale.user_id == owner_id,
        Sale.created_at >= start,
        Sale.created_at < end,
    ).order_by(Sale.created_at.asc(), Sale.id.asc()).all()

    return [
        {
            "sale_id": sale.id,
            "item_id": sale.item_id,
            "item_name": item_name or "(deleted item)",
            "quantity": sale.quantity,
            "total_amount": sale.total_amount,
            "created_at": to_utc_z(sale.created_at),
        }
        for sale, item_name in rows
    ]
