"""
leanerr: error propagation for callback-style code and lean, causally linked traces.

Usage example
-------------
    from leanerr import fail, wrap

    def fetch(url, cb):
        def on_reply(err, reply):
            fail(None if reply.ok else "bad status", meta={"status": reply.status})
            cb(None, reply.body)
        http_get(url, wrap(on_reply, cb, check_first_arg=True))
"""

from leanerr.boundary import AsyncBoundary, CallbackSource, boundary, wrap
from leanerr.errors import (
    ConfigError,
    ErrorKind,
    LoggingConfig,
    MissingCallbackError,
    StructuredError,
    TraceConfig,
    ensure_error,
    fail,
    fail_on_missing,
)
from leanerr.trace import LeanRenderer, configure, render
from leanerr.version import __version__

__all__ = [
    "AsyncBoundary",
    "CallbackSource",
    "boundary",
    "wrap",
    "ConfigError",
    "ErrorKind",
    "LoggingConfig",
    "MissingCallbackError",
    "StructuredError",
    "TraceConfig",
    "ensure_error",
    "fail",
    "fail_on_missing",
    "LeanRenderer",
    "configure",
    "render",
    "__version__",
]
