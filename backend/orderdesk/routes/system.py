# backend/orderdesk/routes/system.py
"""
System health endpoint.

Used by deploy checks and load balancers: 200 while the database answers,
503 otherwise.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Item, Order, Shop, User
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Run a few cheap counts; report latency and whether they succeeded."""
    started = time.perf_counter()
    try:
        counts = {
            "users": db.session.query(User).count(),
            "shops": db.session.query(Shop).count(),
            "products": db.session.query(Item).count(),
            "outOfStock": db.session.query(Item).filter(Item.quantity == 0).count(),
            "orders": db.session.query(Order).count(),
        }
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "error": "Database error",
        }

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "details": counts,
    }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "database": database,
    }
    return body, 200 if healthy else 503
