# Overview: Error taxonomy shared by services and routes, plus JSON error handlers.

from __future__ import annotations

from flask import Flask, current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class AppError(Exception):
    """Base class for errors that carry an HTTP status and a client-safe message."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update(self.details)
        return body


class ValidationError(AppError, ValueError):
    """400-level input problem."""
    status_code = 400


class AuthenticationError(AppError):
    """Bad credentials, unapproved account, or missing/expired session."""
    status_code = 401


class AuthorizationError(AppError):
    """Authenticated, but wrong role or not the owner of the resource."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError, ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""
    status_code = 409


class InsufficientStockError(ConflictError):
    """A checkout line could not be covered by current stock."""

    def __init__(self, product_name: str, product_id: int | None = None):
        super().__init__(
            f"Insufficient stock for product: {product_name}",
            details={
                "code": "insufficient_stock",
                "product_id": product_id,
                "product_name": product_name,
            },
        )
        self.product_id = product_id
        self.product_name = product_name


class InternalError(AppError):
    status_code = 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        if exc.status_code >= 500:
            db.session.rollback()
            current_app.logger.error("Internal error: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
