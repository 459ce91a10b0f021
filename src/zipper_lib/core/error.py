# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout zipper.

Only job-fatal problems are raised as exceptions. Problems with a single
input or entry are logged as warnings and the offending item is skipped.
Each exception carries an associated exit code used by the `zipper` command
to report failures consistently.
"""

from zipper_lib.core.config import CFG


class ZipperError(Exception):
    """Common exception type for all errors that abort an archive job."""

    exit_code = CFG.exit_codes.default


class ZipperCancelledError(ZipperError):
    """Raised when an archive job is cancelled before all inputs were processed."""

    exit_code = CFG.exit_codes.cancelled
