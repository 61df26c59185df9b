# Overview: Receipt number allocation and receipt payload assembly.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import PosBusiness, ReceiptSequence, Transaction

RECEIPT_PREFIX = "R"
RECEIPT_PAD = 6


def format_receipt_number(number: int) -> str:
    return f"{RECEIPT_PREFIX}-{number:0{RECEIPT_PAD}d}"


def ensure_sequence(pos_id: int) -> None:
    """Create the counter row for a business. Caller commits."""
    if db.session.get(ReceiptSequence, pos_id) is None:
        db.session.add(ReceiptSequence(pos_id=pos_id, next_number=1))
        db.session.flush()


def next_receipt_number(pos_id: int) -> str:
    """
    Allocate the next receipt number for a business.

    Bumps the per-business counter with a single UPDATE so two checkouts can
    never draw the same number. Does not commit; the number becomes durable
    with the caller's transaction and is released if that transaction rolls
    back.
    """
    stmt = (
        update(ReceiptSequence)
        .where(ReceiptSequence.pos_id == pos_id)
        .values(next_number=ReceiptSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if not result.rowcount:
        # Businesses created before sequences existed
        ensure_sequence(pos_id)
        result = db.session.execute(stmt)

    current = (
        db.session.query(ReceiptSequence.next_number)
        .filter_by(pos_id=pos_id)
        .scalar()
    )
    return format_receipt_number(current - 1)


def build_receipt(transaction: Transaction, business: PosBusiness) -> dict:
    """Everything the presentation layer needs to print a receipt."""
    return {
        "business": {
            "business_name": business.business_name,
            "business_address": business.business_address,
            "business_phone": business.business_phone,
            "currency_symbol": business.currency_symbol,
        },
        "transaction": transaction.to_dict(),
        "footer": business.receipt_footer,
    }
