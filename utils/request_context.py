"""Propagate the request ID through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar, Token

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def get_request_id() -> str | None:
    """
    Request ID of the request being handled.

    None outside a request (startup, scripts, most unit tests).
    """
    return _current_request_id.get()


def set_request_id(request_id: str) -> Token:
    """
    Set the request ID in context.

    Called by RequestIDMiddleware. Pass the returned token to
    reset_request_id() once the response is built.
    """
    return _current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)


@contextmanager
def request_context(request_id: str):
    """
    Temporarily set the request ID.

    Example:
        with request_context("trace-123"):
            response = success_response({...})  # meta.request_id == "trace-123"
    """
    token = set_request_id(request_id)
    try:
        yield
    finally:
        reset_request_id(token)
