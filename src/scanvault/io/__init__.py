"""Shared file I/O helpers."""

from .archives import extract_archive, is_archive
from .files import file_digest
from .json_io import canonical_json, load_json_file, write_json_atomic, write_text_atomic

__all__ = [
    "canonical_json",
    "extract_archive",
    "file_digest",
    "is_archive",
    "load_json_file",
    "write_json_atomic",
    "write_text_atomic",
]
