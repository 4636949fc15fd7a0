"""Tango CRM core: opportunity mapping, timezone-aware dates and revenue growth."""

__version__ = "0.1.0"
