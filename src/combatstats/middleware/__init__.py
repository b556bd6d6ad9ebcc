# src/combatstats/middleware/__init__.py

"""Middleware components for the Combat Stats API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
