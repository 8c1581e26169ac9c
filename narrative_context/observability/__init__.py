"""
Narrative Context - Observability

Structured JSON logging with trace ids.
"""

from .structured_logging import JSONFormatter, get_trace_id, set_trace_id, setup_logging, trace

__all__ = ["JSONFormatter", "get_trace_id", "set_trace_id", "setup_logging", "trace"]
