"""Utility functions for the CRM credential proxy."""

from .logging import setup_logging, get_logger, default_logger

__all__ = ["setup_logging", "get_logger", "default_logger"]
