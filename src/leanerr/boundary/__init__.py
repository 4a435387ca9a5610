"""Async boundary wrapper: wrap(), boundary() and AsyncBoundary."""

from .wrapper import AsyncBoundary, CallbackSource, boundary, wrap

__all__ = ["AsyncBoundary", "CallbackSource", "boundary", "wrap"]
