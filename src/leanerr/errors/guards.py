from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .types import ErrorKind, StructuredError

NOT_FOUND_MARKER = "No matching object found"


def ensure_error(value: Any, kind: ErrorKind = ErrorKind.UNEXPECTED) -> StructuredError:
    """
    Normalize a failure value into a StructuredError.

    - StructuredError: returned unchanged.
    - other exceptions: wrapped, the original kept as ``__cause__``.
    - anything else: its ``str()`` becomes the message.

    Usage example
    -------------
        err = ensure_error(OSError("disk full"))
        assert err.kind is ErrorKind.UNEXPECTED
    """
    if isinstance(value, StructuredError):
        return value
    if isinstance(value, BaseException):
        return StructuredError.from_exception(value, kind=kind)
    return StructuredError(str(value), kind=kind)


def fail(value: Any, meta: Any = None, *, kind: ErrorKind = ErrorKind.DOMAIN) -> None:
    """
    Raise `value` as a StructuredError, unless it is empty.

    A falsy `value` (``None``, ``""``, ``0``, ``False``, an empty container) is a
    no-op. `meta` (any value but ``None``) is attached when the error does not carry meta yet;
    meta set earlier is never replaced.

    Usage example
    -------------
        def on_read(err, data, cb):
            fail(err)
            fail("empty payload" if not data else None, meta={"size": len(data)})
    """
    if not value:
        return None
    err = ensure_error(value, kind=kind)
    if meta is not None and err.meta is None:
        err.meta = meta
    raise err


def _errmsg(err: Any) -> Optional[str]:
    if isinstance(err, Mapping):
        return err.get("errmsg")
    return getattr(err, "errmsg", None)


def fail_on_missing(err: Any, message: str, *, marker: str = NOT_FOUND_MARKER) -> None:
    """
    Reclassify a data store's "not found" error before raising it.

    When `err` reports `marker` in its ``errmsg`` (attribute or key), `message`
    is raised instead of the store's error. Any other `err` goes through
    ``fail()`` unchanged.

    Usage example
    -------------
        def on_update(err, doc, cb):
            fail_on_missing(err, "order does not exist")
            cb(None, doc)
    """
    if err and _errmsg(err) == marker:
        fail(message)
    fail(err)
