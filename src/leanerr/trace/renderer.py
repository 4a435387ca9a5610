"""
Lean trace rendering.

A rendered trace is one line per causal chain: the failure first, then each
prior call site, joined by the chain separator::

    unexpected thing {"msg":"x"} ./jobs.py(7 < 12) < ./main.py(30) << ./jobs.py(5)

Within a segment, consecutive frames of the same file collapse into one group
``location(line < line)``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any, Optional

from leanerr.errors.config import ConfigError, TraceConfig
from leanerr.errors.frames import StackFrame
from leanerr.errors.types import StructuredError

_PACKAGE_ROOT = os.path.normcase(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))) + os.sep


def _is_library_frame(frame: StackFrame) -> bool:
    if not frame.location or frame.location.startswith("<"):
        return False
    return os.path.normcase(os.path.abspath(frame.location)).startswith(_PACKAGE_ROOT)


class LeanRenderer:
    """
    Renders StructuredErrors and their causal chains as lean traces.

    The working directory is read on every ``render()`` call, so locations are
    relative to the directory current at render time.

    Usage example
    -------------
        renderer = LeanRenderer(TraceConfig(hide_internal_frames=True))
        logger.error(renderer.render(err))
    """

    def __init__(self, config: Optional[TraceConfig] = None) -> None:
        self._config = config if config is not None else TraceConfig()

    @property
    def config(self) -> TraceConfig:
        return self._config

    def render(self, err: BaseException) -> str:
        """Render `err` and its prior contexts, outermost failure first."""
        if not isinstance(err, StructuredError):
            err = StructuredError.from_exception(err)
        cfg = self._config
        cwd = os.getcwd()

        links = list(err.chain())
        hidden = 0
        if cfg.max_chain_depth is not None and len(links) > cfg.max_chain_depth + 1:
            hidden = len(links) - (cfg.max_chain_depth + 1)
            links = links[: cfg.max_chain_depth + 1]

        segments = [self.render_segment(link, cwd=cwd) for link in links]
        if hidden:
            segments.append(f"...({hidden} more)")
        return cfg.chain_separator.join(segments)

    def render_segment(self, err: StructuredError, *, cwd: Optional[str] = None) -> str:
        """Render one chain link: message, meta and collapsed frame groups."""
        parts: list[str] = []
        if err.message:
            parts.append(err.message)
        if err.meta is not None:
            parts.append(self.format_meta(err.meta))
        frames = self.format_frames(err.trace, cwd=cwd if cwd is not None else os.getcwd())
        if frames:
            parts.append(frames)
        return " ".join(parts)

    def format_meta(self, meta: Any) -> str:
        if isinstance(meta, (Mapping, list, tuple)):
            indent = self._config.meta_indent
            separators = (",", ":") if indent is None else None
            return json.dumps(meta, indent=indent, separators=separators, default=str, ensure_ascii=False)
        return str(meta)

    def format_frames(self, frames: tuple[StackFrame, ...], *, cwd: str) -> str:
        cfg = self._config
        groups: list[tuple[str, list[str]]] = []
        for frame in frames:
            location = self.normalize_location(frame.location, cwd=cwd)
            if cfg.hide_internal_frames and self._is_hidden(frame, location):
                continue
            label = self._line_label(frame)
            if groups and groups[-1][0] == location:
                groups[-1][1].append(label)
            else:
                groups.append((location, [label]))
        return cfg.frame_separator.join(
            f"{location}({cfg.frame_separator.join(labels)})" for location, labels in groups
        )

    def normalize_location(self, location: Optional[str], *, cwd: str) -> str:
        """
        Shorten a file name for display.

        - missing: the unknown marker
        - under `cwd`: rewritten as ``./relative/path``
        - each dependency directory segment: replaced by the dependency token
        """
        cfg = self._config
        if not location:
            return cfg.unknown_marker
        if location.startswith("<"):
            return location
        # a filesystem root is not a project directory
        prefix = cwd.rstrip(os.sep) + os.sep
        if os.path.dirname(cwd) != cwd and location.startswith(prefix):
            location = "." + os.sep + location[len(prefix):]
        return os.sep.join(
            cfg.dependency_token if part == cfg.dependency_dir else part for part in location.split(os.sep)
        )

    def _is_hidden(self, frame: StackFrame, location: str) -> bool:
        if frame.is_runtime_internal:
            return True
        if not location.startswith("." + os.sep):
            return True
        return _is_library_frame(frame)

    def _line_label(self, frame: StackFrame) -> str:
        label = str(frame.line) if frame.line is not None else self._config.unknown_marker
        if frame.is_evaluated:
            label += "*"
        if frame.is_runtime_internal:
            label += "+"
        return label


_process_renderer: Optional[LeanRenderer] = None


def configure(config: Optional[TraceConfig] = None) -> LeanRenderer:
    """
    Install the process-wide renderer. Call once at startup, before any rendering.

    Raises ConfigError if a process renderer already exists, whether from an
    earlier ``configure()`` or from a ``get_renderer()`` that built the default.

    Usage example
    -------------
        configure(TraceConfig.load(Path.cwd()))
    """
    global _process_renderer
    if _process_renderer is not None:
        raise ConfigError("The process renderer is already configured.")
    _process_renderer = LeanRenderer(config if config is not None else TraceConfig.from_env())
    return _process_renderer


def get_renderer() -> LeanRenderer:
    """Return the process renderer, building it from the environment on first use."""
    global _process_renderer
    if _process_renderer is None:
        _process_renderer = LeanRenderer(TraceConfig.from_env())
    return _process_renderer


def render(err: BaseException) -> str:
    """Render `err` with the process renderer."""
    return get_renderer().render(err)
