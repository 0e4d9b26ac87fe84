"""
Observability Module.

Structured logging for benchmark runs.
"""

from mdbench.observability.logging import (
    LogContext,
    configure_logging,
)

__all__ = [
    "LogContext",
    "configure_logging",
]
