"""
Utility modules for the clinic finance application.

This package contains shared utility functions and helpers used across
the application, including datetime utilities, money arithmetic, and
identifier helpers.
"""

from utils.money import to_decimal

__all__ = ['to_decimal']
