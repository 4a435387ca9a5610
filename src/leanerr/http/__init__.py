"""HTTP response adapters turning failures into JSON error bodies."""

from .adapters import DEFAULT_ERROR_STATUS, error_payload, json_errback, json_errors

__all__ = ["DEFAULT_ERROR_STATUS", "error_payload", "json_errback", "json_errors"]
