"""Configuration management for tcx_toolkit."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _get_int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Config:
    """Application configuration."""

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    LOG_FILE = os.environ.get("TCX_LOG_FILE") or None

    # HTTP
    REQUEST_TIMEOUT = _get_int_env("TCX_REQUEST_TIMEOUT", 30)  # seconds
    USER_AGENT = os.environ.get(
        "TCX_USER_AGENT",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    )
    MAX_META_REFRESH = _get_int_env("TCX_MAX_META_REFRESH", 5)

    # Export
    # "abort" stops the run on the first unreadable export, "skip" carries on.
    EXPORT_FAILURE_POLICY = os.environ.get("TCX_ON_EXPORT_ERROR", "abort")

    def __repr__(self):
        return f"Config(LOG_LEVEL={self.LOG_LEVEL}, REQUEST_TIMEOUT={self.REQUEST_TIMEOUT})"
