"""
JSON error responses for HTTP handlers.

The web framework stays outside leanerr: a response adapter is any callable
``respond(payload, headers=None, status=None)`` that serializes `payload` as
the response body.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Mapping, Optional

from leanerr.errors.logging import log
from leanerr.trace.renderer import render

Respond = Callable[..., Any]
Headers = Optional[Mapping[str, str]]

DEFAULT_ERROR_STATUS = 500


def error_payload(err: Any) -> dict[str, str]:
    """Return the JSON body sent for `err`."""
    if isinstance(err, BaseException):
        return {"error": str(err) or type(err).__name__}
    return {"error": str(err)}


def _respond_with_error(respond: Respond, exc: Exception, headers: Headers, status: int) -> None:
    log(render(exc))
    respond(error_payload(exc), headers, status)


def json_errors(
    handler: Callable[..., Any],
    headers: Headers = None,
    status: int = DEFAULT_ERROR_STATUS,
) -> Callable[..., Any]:
    """
    Wrap ``handler(request, respond, ...)`` so exceptions become JSON error responses.

    The exception's lean trace goes to the log sink, then
    ``respond({"error": ...}, headers, status)`` is called. An exception raised by
    `respond` itself propagates. A handler called without a `respond` argument
    re-raises its failure as the cause of a ``TypeError``.

    Usage example
    -------------
        def get_user(request, respond):
            respond({"user": users[request.args["id"]]})

        app.route("/user")(json_errors(get_user, status=404))
    """

    @functools.wraps(handler)
    def _wrapped(*args: Any, **kwargs: Any) -> Any:
        try:
            return handler(*args, **kwargs)
        except Exception as exc:
            if "respond" in kwargs:
                respond = kwargs["respond"]
            elif len(args) > 1:
                respond = args[1]
            else:
                raise TypeError(f"{getattr(handler, '__name__', 'handler')} failed and was called without a respond argument") from exc
            _respond_with_error(respond, exc, headers, status)
            return None

    return _wrapped


def json_errback(
    func: Callable[..., Any],
    respond: Respond,
    headers: Headers = None,
    status: int = DEFAULT_ERROR_STATUS,
) -> Callable[..., Any]:
    """
    Wrap a callback ``func(err, ...)`` used inside an HTTP handler.

    A truthy `err` is answered right away and `func` does not run; an exception
    raised by `func` is logged and answered the same way.

    Usage example
    -------------
        def get_user(request, respond):
            def found(err, user):
                respond({"user": user})
            db.find_one(request.args["id"], json_errback(found, respond))
    """

    @functools.wraps(func)
    def _wrapped(*args: Any, **kwargs: Any) -> Any:
        if args and args[0]:
            respond(error_payload(args[0]), headers, status)
            return None
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            _respond_with_error(respond, exc, headers, status)
            return None

    return _wrapped
