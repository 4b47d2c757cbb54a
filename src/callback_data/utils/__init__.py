"""Utility functions for callback_data.

This module provides payload size calculation.
"""

from __future__ import annotations

from .sizing import encoded_size, json_size, size_report

__all__ = [
    "encoded_size",
    "json_size",
    "size_report",
]
