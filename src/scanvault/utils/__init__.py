"""Shared utility helpers."""

from __future__ import annotations

from .naming import file_system_encode, sanitize_output_name

__all__ = ["file_system_encode", "sanitize_output_name"]
