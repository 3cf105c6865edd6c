"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Domain error taxonomy with HTTP mapping
- security.py       : Session credential issuing/verification
- validators.py     : Domain input rules (rating, text, email)
- audit.py          : Request audit and security-header middleware
"""
from winereview.core.config import get_settings, Settings
from winereview.core.logging_config import setup_logging, get_logger, LoggerMixin

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "LoggerMixin",
]
