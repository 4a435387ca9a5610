"""Lean trace renderer and uncaught-error hooks."""

from .renderer import LeanRenderer, configure, get_renderer, render
from .hooks import install_excepthook, loop_exception_handler, report

__all__ = [
    "LeanRenderer",
    "configure",
    "get_renderer",
    "render",
    "install_excepthook",
    "loop_exception_handler",
    "report",
]
