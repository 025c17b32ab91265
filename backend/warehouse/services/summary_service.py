# Overview: Daily sales summary emails, one per user with sales that day.

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import User
from . import notification_service
from .reporting_service import sales_for_day


def send_daily_summaries(day: date) -> int:
    """
    Email every user their sales for ``day`` (UTC). Users without sales that
    day get nothing. A failed email is logged and the loop moves on.

    Returns the number of summaries handed to the mailer.
    """
    sent = 0
    users = db.session.query(User).order_by(User.id.asc()).all()
    day_label = day.isoformat()

    for user in users:
        rows = sales_for_day(user.id, day)
        if not rows:
            continue
        if notification_service.notify(notification_service.send_daily_sales_summary, user, day_label, rows):
            sent += 1

    current_app.logger.info("Daily summaries for %s: %s sent", day_label, sent)
    return sent
