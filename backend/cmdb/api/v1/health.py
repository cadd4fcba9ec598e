"""Liveness endpoint with a database check."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cmdb.api.deps import json_response, timing
from cmdb.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report ``ok`` when the store answers, ``degraded`` with a 503 otherwise."""

    try:
        db.session.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        db_ok = False
    payload = {
        "status": "ok" if db_ok else "degraded",
        "db": "ok" if db_ok else "fail",
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if db_ok else 503)
