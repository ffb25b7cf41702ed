"""Utility modules."""

from services.indexer.src.indexer.utils.timestamps import iso_to_unix, unix_to_datetime

__all__ = [
    "iso_to_unix",
    "unix_to_datetime",
]
