"""Pydantic message modeling for callback_data.

This module provides the CallbackModel base class for defining callback
payloads with Pydantic.
"""

from __future__ import annotations

from .base import CallbackModel

__all__ = [
    "CallbackModel",
]
