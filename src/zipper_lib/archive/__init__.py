# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Utilities for packaging files and directories into a ZIP archive.

This module provides the `Archiver` class, which walks the inputs of an
`ArchiveJob`, deduplicates them by their archive key and streams their
contents into the archive.
"""

from .archiver import Archiver
from .job import ArchiveEntry, ArchiveJob, CompressionLevel

__all__ = [
    "ArchiveEntry",
    "ArchiveJob",
    "Archiver",
    "CompressionLevel",
]
