# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the zipper command-line tool.

zipper packages files and directories into a single ZIP archive. Files found
inside directories keep their path relative to the parent of the directory,
files provided directly are stored under their name, and every archive path
is written only once.
"""

from .zipper import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "archive",
    "core",
]
