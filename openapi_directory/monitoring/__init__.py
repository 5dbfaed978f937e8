"""Monitoring utilities."""

from .metrics import MetricsManager

__all__ = ["MetricsManager"]
