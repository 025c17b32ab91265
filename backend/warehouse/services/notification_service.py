# Overview: Composes and sends account and inventory emails.

"""
Notification dispatcher.

Each send_* function builds one email and hands it to the mailer; delivery
errors propagate as MailDeliveryError. Primary operations never call them
directly: they go through notify(), which logs and swallows the failure so a
committed sale, adjustment or registration is never undone by mail trouble.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import mailer
from ..models import Item, Sale, User


def _display_name(user: User) -> str:
    return user.name or user.email


def _warehouse_label(user: User) -> str:
    return user.warehouse_name or "your warehouse"


def _money(amount: float) -> str:
    return f"{amount:,.2f}"


def notify(send_fn, *args, **kwargs) -> bool:
    """
    Best-effort dispatch. Returns True when the message was handed off.
    """
    try:
        send_fn(*args, **kwargs)
        return True
    except Exception:
        current_app.logger.exception("Notification %s failed", getattr(send_fn, "__name__", send_fn))
        return False


def send_verification_email(user: User, token: str):
    link = f"{current_app.config['API_BASE_URL'].rstrip('/')}/api/auth/verify/{token}"
    hours = current_app.config["VERIFICATION_TOKEN_HOURS"]
    text_body = (
        f"Hello {_display_name(user)},\n\n"
        f"Please verify your email address to activate {_warehouse_label(user)}:\n"
        f"{link}\n\n"
        f"This link expires in {hours} hours."
    )
    html_body = (
        f"<p>Hello {_display_name(user)},</p>"
        f"<p>Please verify your email address by clicking <a href=\"{link}\">this link</a>.</p>"
        f"<p>This link expires in {hours} hours.</p>"
    )
    return mailer.send([user.email], "Verify your email", text_body, html_body)


def send_password_reset_link(user: User, token: str):
    link = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/reset-password/{token}"
    hours = current_app.config["RESET_TOKEN_HOURS"]
    text_body = (
        f"Hello {_display_name(user)},\n\n"
        f"A password reset was requested for your account. Reset it here:\n"
        f"{link}\n\n"
        f"This link expires in {hours} hour(s). If you did not ask for this, ignore this email."
    )
    html_body = (
        f"<p>Hello {_display_name(user)},</p>"
        f"<p><a href=\"{link}\">Reset your password</a>. "
        f"This link expires in {hours} hour(s).</p>"
    )
    return mailer.send([user.email], "Password reset request", text_body, html_body)


def send_low_stock_alert(user: User, item: Item):
    threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    text_body = (
        f"Low stock alert for {_warehouse_label(user)}.\n\n"
        f"{item.name} has {item.quantity} unit(s) left (threshold {threshold}).\n"
        f"Consider restocking soon."
    )
    html_body = (
        f"<p>Low stock alert for {_warehouse_label(user)}.</p>"
        f"<p><strong>{item.name}</strong> has {item.quantity} unit(s) left.</p>"
    )
    return mailer.send([user.email], f"Low stock alert: {item.name}", text_body, html_body)


def send_sale_notification(user: User, sale: Sale, item: Item):
    text_body = (
        f"A sale was recorded in {_warehouse_label(user)}.\n\n"
        f"Item: {item.name}\n"
        f"Quantity: {sale.quantity}\n"
        f"Total: {_money(sale.total_amount)}\n"
        f"Remaining stock: {item.quantity}"
    )
    html_body = (
        f"<p>A sale was recorded in {_warehouse_label(user)}.</p>"
        f"<ul><li>Item: {item.name}</li><li>Quantity: {sale.quantity}</li>"
        f"<li>Total: {_money(sale.total_amount)}</li>"
        f"<li>Remaining stock: {item.quantity}</li></ul>"
    )
    return mailer.send([user.email], f"Sale recorded: {item.name}", text_body, html_body)


def send_daily_sales_summary(user: User, day_label: str, rows: list[dict]):
    """rows: [{"item_name", "quantity", "total_amount"}] for one day."""
    total = sum(row["total_amount"] for row in rows)
    units = sum(row["quantity"] for row in rows)
    lines = [
        f"- {row['item_name']}: {row['quantity']} unit(s), {_money(row['total_amount'])}"
        for row in rows
    ]
    text_body = (
        f"Daily sales summary for {_warehouse_label(user)} on {day_label}.\n\n"
        + "\n".join(lines)
        + f"\n\nSales: {len(rows)}  Units: {units}  Revenue: {_money(total)}"
    )
    items_html = "".join(
        f"<li>{row['item_name']}: {row['quantity']} unit(s), {_money(row['total_amount'])}</li>"
        for row in rows
    )
    html_body = (
        f"<p>Daily sales summary for {_warehouse_label(user)} on {day_label}.</p>"
        f"<ul>{items_html}</ul>"
        f"<p>Sales: {len(rows)} &middot; Units: {units} &middot; Revenue: {_money(total)}</p>"
    )
    return mailer.send([user.email], f"Daily sales summary: {day_label}", text_body, html_body)
