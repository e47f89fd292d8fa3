"""Observability module for Beer Service."""

from .tracing import init_tracing, get_tracer
from .metrics import init_metrics, get_metrics, render_latest
from .logging import configure_logging

__all__ = [
    "init_tracing",
    "get_tracer",
    "init_metrics",
    "get_metrics",
    "render_latest",
    "configure_logging",
]
