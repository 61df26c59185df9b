# Overview: Service-layer operations for reporting; sales aggregation per business and admin counts.

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app
from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import Transaction
from ..money_utils import format_cents
from ..time_utils import local_day_bounds, parse_iso_date, parse_iso_datetime
from . import approval_service

RECENT_TRANSACTIONS = 5


def _report_timezone() -> str | None:
    return current_app.config.get("REPORT_TIMEZONE")


def today() -> date:
    """Current calendar day in the report time zone."""
    tz_name = _report_timezone()
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return date.today()


def _transactions_between(pos_id: int, start: datetime, end: datetime) -> list[Transaction]:
    return (
        db.session.query(Transaction)
        .filter(
            Transaction.pos_id == pos_id,
            Transaction.created_at >= start,
            Transaction.created_at <= end,
        )
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )


def daily_sales(pos_id: int, day: date) -> dict:
    """
    Sales for one calendar day [00:00:00.000, 23:59:59.999] in the report
    time zone (REPORT_TIMEZONE, else the server's local zone).
    """
    start, end = local_day_bounds(day, _report_timezone())
    transactions = _transactions_between(pos_id, start, end)
    total_cents = sum(t.total_cents for t in transactions)
    return {
        "date": day.isoformat(),
        "transactions": [t.to_dict() for t in transactions],
        "total_sales": format_cents(total_cents),
        "total_transaction_count": len(transactions),
    }


def _range_bound(value: str | None, *, end: bool) -> datetime:
    """
    Accept either a calendar date (YYYY-MM-DD) or an ISO-8601 datetime.

    A bare date expands to the start (or, for `end`, the last millisecond)
    of that day in the report time zone.
    """
    if value is None or not value.strip():
        raise ValidationError("Start date and end date are required")
    value = value.strip()
    try:
        if len(value) == 10:
            day = parse_iso_date(value)
            start, finish = local_day_bounds(day, _report_timezone())
            return finish if end else start
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def range_sales(pos_id: int, start: str | None, end: str | None) -> list[Transaction]:
    """Transactions with start <= created_at <= end, newest first."""
    start_dt = _range_bound(start, end=False)
    end_dt = _range_bound(end, end=True)
    if start_dt > end_dt:
        raise ValidationError("Start date must not be after end date")
    return _transactions_between(pos_id, start_dt, end_dt)


def business_summary(pos_id: int) -> dict:
    """Lifetime totals for one business plus its most recent sales."""
    count, total_cents = (
        db.session.query(
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.total_cents), 0),
        )
        .filter(Transaction.pos_id == pos_id)
        .one()
    )
    recent = (
        db.session.query(Transaction)
        .filter(Transaction.pos_id == pos_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(RECENT_TRANSACTIONS)
        .all()
    )
    return {
        "total_sales": format_cents(int(total_cents)),
        "total_transactions": count,
        "recent_transactions": [t.to_dict() for t in recent],
    }


def admin_stats() -> dict:
    counts = approval_service.status_counts()
    return {
        "total_pos": sum(counts.values()),
        "pending_pos": counts["pending"],
        "approved_pos": counts["approved"],
        "rejected_pos": counts["rejected"],
    }
