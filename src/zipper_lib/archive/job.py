# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import stat
import threading
import time
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Self

from zipper_lib.core.config import CFG
from zipper_lib.core.error import ZipperError

# range of dates representable in a ZIP header
_ZIP_MIN_DATE = (1980, 1, 1, 0, 0, 0)
_ZIP_MAX_DATE = (2107, 12, 31, 23, 59, 59)


class CompressionLevel(Enum):
    """
    Compression applied to archive entries.
    """

    STORE = 0
    FASTEST = 1
    DEFAULT = 6
    BEST = 9

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding CompressionLevel.

        Args:
            s (str): Name of the level, case-insensitive (e.g., "store", "BEST").

        Returns:
            CompressionLevel: The matching level.

        Raises:
            ZipperError: If the string does not name a known level.
        """
        try:
            return cls[s.strip().upper()]
        except KeyError as e:
            raise ZipperError(
                f"Unknown compression level '{s}'. Expected one of: {', '.join(str(x) for x in cls)}."
            ) from e

    @property
    def method(self) -> int:
        """ZIP compression method used for this level."""
        return zipfile.ZIP_STORED if self is CompressionLevel.STORE else zipfile.ZIP_DEFLATED

    @property
    def zlibLevel(self) -> int | None:
        """zlib level passed to the compressor, or None for stored entries."""
        return None if self is CompressionLevel.STORE else self.value


@dataclass
class ArchiveJob:
    """
    A single request to package a set of files and directories into a ZIP archive.

    Attributes:
        inputs (list[str]): Paths to files and directories, in the order they are processed.
        output (str): Path to the archive to create or overwrite.
        level (CompressionLevel): Compression applied to every entry.
        include_original (bool): Store file inputs under their path relative to the
            current working directory instead of under their base name.
        cancel (threading.Event): Set to request cancellation of the job.
    """

    inputs: list[str]
    output: str = CFG.archiver.default_output
    level: CompressionLevel = CompressionLevel.DEFAULT
    include_original: bool = False
    cancel: threading.Event = field(default_factory=threading.Event)


@dataclass(frozen=True)
class ArchiveEntry:
    """
    One file stored in the archive.

    Metadata is taken from the opened file, not from the earlier directory walk.
    """

    source: Path
    key: str
    size: int
    mtime: float
    mode: int

    @classmethod
    def fromStat(cls, source: Path, key: str, st: os.stat_result) -> Self:
        """
        Create an ArchiveEntry from the metadata of an opened file.

        Args:
            source (Path): Absolute path to the file.
            key (str): Forward-slash path under which the file is stored.
            st (os.stat_result): Result of `os.fstat` on the opened file.

        Returns:
            ArchiveEntry: The entry.
        """
        return cls(
            source=source, key=key, size=st.st_size, mtime=st.st_mtime, mode=st.st_mode
        )

    def toZipInfo(self, level: CompressionLevel) -> zipfile.ZipInfo:
        """
        Build the ZIP header for this entry.

        Args:
            level (CompressionLevel): Compression to apply.

        Returns:
            zipfile.ZipInfo: Header with name, date, permissions, size and compression set.
        """
        date_time = time.localtime(self.mtime)[:6]
        date_time = min(max(date_time, _ZIP_MIN_DATE), _ZIP_MAX_DATE)

        info = zipfile.ZipInfo(self.key, date_time=date_time)
        info.external_attr = (stat.S_IMODE(self.mode) | stat.S_IFREG) << 16
        info.file_size = self.size
        info.compress_type = level.method
        # zipfile reads the per-entry level from this attribute when writing;
        # Python 3.13+ also exposes it publicly as `compress_level`
        info._compresslevel = level.zlibLevel
        return info
