"""Observability – structured logging helpers."""
from aggregate_kit.observability.logging.factory import JsonLoggerFactory
from aggregate_kit.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
