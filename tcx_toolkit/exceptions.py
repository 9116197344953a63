"""Errors raised by tcx_toolkit.

Library code raises these; only the command line turns them into messages
and exit codes.
"""

from typing import Optional


class ToolkitError(Exception):
    """Base class for all tcx_toolkit errors."""


class InputError(ToolkitError):
    """A command line value is missing or malformed."""


class ServiceConnectionError(ToolkitError):
    """The remote host could not be reached (DNS or socket level)."""

    def __init__(self, host: str, reason: Optional[str] = None):
        self.host = host
        self.reason = reason
        message = f"cannot connect to '{host}'."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class AuthError(ToolkitError):
    """Credentials were rejected or the session is not usable."""

    def __init__(self, service: str, reason: Optional[str] = None):
        self.service = service
        self.reason = reason
        message = f"{service} login failed."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ListingError(ToolkitError):
    """The activity listing could not be understood."""


class ExportError(ToolkitError):
    """An activity export could not be fetched or read."""

    def __init__(self, activity_id: str, reason: str):
        self.activity_id = activity_id
        self.reason = reason
        super().__init__(f"activity {activity_id}: {reason}")


class FormNotFoundError(ToolkitError):
    """A page did not contain the expected HTML form or field."""
