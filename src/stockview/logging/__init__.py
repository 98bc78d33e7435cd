"""Logging helpers."""

from .logger import ConsoleReporter, setup_logger

__all__ = ["ConsoleReporter", "setup_logger"]
