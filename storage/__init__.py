"""Data file IO and run state persistence."""

from storage.files import load_data_file, read_data_file, write_data_file
from storage.store import FileRunStore, RunStore

__all__ = [
    "FileRunStore",
    "RunStore",
    "load_data_file",
    "read_data_file",
    "write_data_file",
]
