# backend/posadmin/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///posadmin.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session lifetimes
    SESSION_ABSOLUTE_TIMEOUT_HOURS = _int_env("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)
    SESSION_IDLE_TIMEOUT_HOURS = _int_env("SESSION_IDLE_TIMEOUT_HOURS", 2)

    # IANA zone name used for day boundaries in sales reports.
    # None means the server's local time zone.
    REPORT_TIMEZONE = os.environ.get("REPORT_TIMEZONE") or None

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    ]

    # Defaults applied to every newly registered POS business
    DEFAULT_CURRENCY_SYMBOL = os.environ.get("DEFAULT_CURRENCY_SYMBOL", "$")
    DEFAULT_TAX_RATE = os.environ.get("DEFAULT_TAX_RATE", "8.5")
    DEFAULT_RECEIPT_FOOTER = os.environ.get(
        "DEFAULT_RECEIPT_FOOTER", "Thank you for your business!\nPlease come again"
    )
    DEFAULT_BUSINESS_ADDRESS = os.environ.get("DEFAULT_BUSINESS_ADDRESS", "123 Main Street, City, ST 12345")
    DEFAULT_BUSINESS_PHONE = os.environ.get("DEFAULT_BUSINESS_PHONE", "(555) 123-4567")
