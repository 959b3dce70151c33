"""
Fingerprint Cache — Observability Module

Structured logging setup shared by the whole package.

Usage:
    from fpcache.observability import setup_logging

    setup_logging(level="DEBUG", json_format=True)
"""

from .structured_logging import JSONFormatter, setup_logging

__all__ = [
    "JSONFormatter",
    "setup_logging",
]
