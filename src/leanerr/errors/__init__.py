"""
errors subpackage: structured errors, the error construction guard, config and logging.

Key primitives
--------------
- StructuredError: message + meta + captured stack + causal link to a prior call site
- ErrorKind: domain / unexpected / upstream / programmer
- fail(): normalize a failure value and raise it (no-op for empty values)
- ensure_error(): normalize without raising
- fail_on_missing(): reclassify a data store's "not found" error
- TraceConfig / LoggingConfig: frozen configuration, env and YAML aware
- configure_logging(), log(), set_log_sink(): diagnostics output
"""

from .config import ConfigError, LoggingConfig, TraceConfig, load_config
from .frames import StackFrame, capture_stack, frames_from_exception
from .types import ErrorKind, MissingCallbackError, StructuredError
from .guards import ensure_error, fail, fail_on_missing
from .logging import configure_logging, log, set_log_sink

__all__ = [
    "ConfigError",
    "LoggingConfig",
    "TraceConfig",
    "load_config",
    "StackFrame",
    "capture_stack",
    "frames_from_exception",
    "ErrorKind",
    "MissingCallbackError",
    "StructuredError",
    "ensure_error",
    "fail",
    "fail_on_missing",
    "configure_logging",
    "log",
    "set_log_sink",
]
