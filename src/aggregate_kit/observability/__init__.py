"""Observability – logging for the persistence coordinator."""
from aggregate_kit.observability.logging import JsonLoggerFactory, get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
