from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_pos
from ..services import reporting_service
from ..time_utils import parse_iso_date

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("/daily")
@require_auth
@require_pos
def daily_sales():
    """
    Query params:
    - date: YYYY-MM-DD (defaults to today in the report time zone)
    """
    raw = request.args.get("date")
    if raw:
        try:
            day = parse_iso_date(raw)
        except ValueError:
            return jsonify({"error": "date must be YYYY-MM-DD"}), 400
    else:
        day = reporting_service.today()

    return jsonify(reporting_service.daily_sales(g.principal.id, day)), 200


@sales_bp.get("/range")
@require_auth
@require_pos
def range_sales():
    """
    Query params (inclusive):
    - start: YYYY-MM-DD or ISO-8601 datetime
    - end: YYYY-MM-DD or ISO-8601 datetime
    """
    transactions = reporting_service.range_sales(
        g.principal.id,
        request.args.get("start"),
        request.args.get("end"),
    )
    return jsonify({
        "items": [t.to_dict() for t in transactions],
        "count": len(transactions),
    }), 200


@sales_bp.get("/summary")
@require_auth
@require_pos
def summary():
    return jsonify(reporting_service.business_summary(g.principal.id)), 200
