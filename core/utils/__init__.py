"""
Core Utilities Package

This package contains utility functions and helpers used throughout the application.

Modules:
    - time: RFC3339 formatting/parsing and UTC clock helpers
"""

from core.utils.time import current_utc_datetime, parse_rfc3339, to_rfc3339

__all__ = ["current_utc_datetime", "parse_rfc3339", "to_rfc3339"]
