"""Exception hierarchy for feishu_socialite.

All exceptions inherit from :class:`SocialiteError`, which carries a
class-level ``kind`` (an :class:`ErrorKind` member) and the raw response
``body`` that triggered it. Callers can either catch by type or match on
``exc.kind``::

    try:
        provider.fetch_all_employees()
    except SocialiteError as exc:
        if exc.kind is ErrorKind.AUTHORIZE_FAILED:
            log_platform_error(exc.body)

Subclass hierarchy::

    SocialiteError
    +-- InvalidArgumentError   (INVALID_ARGUMENT)
    |   +-- ConfigError        (INVALID_ARGUMENT)
    +-- InvalidTicketError     (INVALID_TICKET)
    +-- BadRequestError        (BAD_REQUEST)
    +-- InvalidTokenError      (INVALID_TOKEN)
    +-- AuthorizeFailedError   (AUTHORIZE_FAILED)

Transport failures are not wrapped: ``httpx`` exceptions reach the caller
as raised, except for the HTTP 400 case in the directory fetchers.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any


class ErrorKind(str, enum.Enum):
    """Structured classification of every error this package raises."""

    GENERIC = "generic"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_TICKET = "invalid_ticket"
    BAD_REQUEST = "bad_request"
    INVALID_TOKEN = "invalid_token"
    AUTHORIZE_FAILED = "authorize_failed"


class SocialiteError(Exception):
    """Base exception for all feishu_socialite errors.

    Args:
        message: Human-readable error description.
        body: The raw platform response (or any diagnostic payload)
            associated with the failure. Stored as a dict; ``None``
            becomes an empty dict.
    """

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, body: Mapping[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.body: dict[str, Any] = dict(body) if body else {}


class InvalidArgumentError(SocialiteError):
    """Raised for bad configuration, unknown provider names, or an empty profile response."""

    kind = ErrorKind.INVALID_ARGUMENT


class ConfigError(InvalidArgumentError):
    """Raised when provider configuration cannot be loaded or validated."""


class InvalidTicketError(SocialiteError):
    """Raised when an app token is requested in default mode without an ``app_ticket``."""

    kind = ErrorKind.INVALID_TICKET


class BadRequestError(SocialiteError):
    """Raised when a tenant token is requested in default mode without an ``app_ticket``."""

    kind = ErrorKind.BAD_REQUEST


class InvalidTokenError(SocialiteError):
    """Raised when the app token response carries no ``app_access_token``."""

    kind = ErrorKind.INVALID_TOKEN


class AuthorizeFailedError(SocialiteError):
    """Raised when a token, session or directory response is unusable.

    Always carries the raw response in :attr:`body`.
    """

    kind = ErrorKind.AUTHORIZE_FAILED
