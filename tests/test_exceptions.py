"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from feishu_socialite.exceptions import (
    AuthorizeFailedError,
    BadRequestError,
    ConfigError,
    ErrorKind,
    InvalidArgumentError,
    InvalidTicketError,
    InvalidTokenError,
    SocialiteError,
)


@pytest.mark.parametrize(
    "exc_cls, kind",
    [
        (InvalidArgumentError, ErrorKind.INVALID_ARGUMENT),
        (ConfigError, ErrorKind.INVALID_ARGUMENT),
        (InvalidTicketError, ErrorKind.INVALID_TICKET),
        (BadRequestError, ErrorKind.BAD_REQUEST),
        (InvalidTokenError, ErrorKind.INVALID_TOKEN),
        (AuthorizeFailedError, ErrorKind.AUTHORIZE_FAILED),
    ],
)
def test_kinds(exc_cls, kind) -> None:
    exc = exc_cls("boom")
    assert isinstance(exc, SocialiteError)
    assert exc.kind is kind
    assert str(exc) == "boom"


def test_body_defaults_to_empty_dict() -> None:
    assert AuthorizeFailedError("x").body == {}
    assert AuthorizeFailedError("x", None).body == {}


def test_body_is_copied() -> None:
    raw = {"msg": "bad"}
    exc = AuthorizeFailedError("bad", raw)
    raw["msg"] = "changed"
    assert exc.body == {"msg": "bad"}
