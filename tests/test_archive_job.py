# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import stat
import threading
import time
import zipfile
from pathlib import Path

import pytest

from zipper_lib.archive.job import ArchiveEntry, ArchiveJob, CompressionLevel
from zipper_lib.core.config import CFG
from zipper_lib.core.error import ZipperError


@pytest.mark.parametrize(
    "string, expected",
    [
        ("store", CompressionLevel.STORE),
        ("FASTEST", CompressionLevel.FASTEST),
        ("Default", CompressionLevel.DEFAULT),
        (" best ", CompressionLevel.BEST),
    ],
)
def test_compression_level_from_string(string, expected):
    assert CompressionLevel.fromStr(string) is expected


def test_compression_level_from_string_invalid():
    with pytest.raises(ZipperError, match="Unknown compression level 'ultra'"):
        CompressionLevel.fromStr("ultra")


def test_compression_level_str():
    assert [str(x) for x in CompressionLevel] == ["store", "fastest", "default", "best"]


@pytest.mark.parametrize(
    "level, method, zlib_level",
    [
        (CompressionLevel.STORE, zipfile.ZIP_STORED, None),
        (CompressionLevel.FASTEST, zipfile.ZIP_DEFLATED, 1),
        (CompressionLevel.DEFAULT, zipfile.ZIP_DEFLATED, 6),
        (CompressionLevel.BEST, zipfile.ZIP_DEFLATED, 9),
    ],
)
def test_compression_level_method_and_zlib_level(level, method, zlib_level):
    assert level.method == method
    assert level.zlibLevel == zlib_level


def test_archive_job_defaults():
    job = ArchiveJob(inputs=["a", "b"])

    assert job.inputs == ["a", "b"]
    assert job.output == CFG.archiver.default_output
    assert job.level is CompressionLevel.DEFAULT
    assert job.include_original is False
    assert isinstance(job.cancel, threading.Event)
    assert not job.cancel.is_set()


def test_archive_job_cancel_events_are_not_shared():
    first = ArchiveJob(inputs=[])
    second = ArchiveJob(inputs=[])

    first.cancel.set()

    assert not second.cancel.is_set()


def test_archive_entry_from_stat(tmp_path):
    file = tmp_path / "data.bin"
    file.write_bytes(b"12345")
    file.chmod(0o640)

    with file.open("rb") as f:
        st = os.fstat(f.fileno())

    entry = ArchiveEntry.fromStat(file, "dir/data.bin", st)

    assert entry.source == file
    assert entry.key == "dir/data.bin"
    assert entry.size == 5
    assert entry.mtime == st.st_mtime
    assert stat.S_IMODE(entry.mode) == 0o640


def _entry(mtime: float, mode: int = stat.S_IFREG | 0o644) -> ArchiveEntry:
    return ArchiveEntry(
        source=Path("/src/a.txt"), key="proj/a.txt", size=10, mtime=mtime, mode=mode
    )


def test_archive_entry_to_zip_info():
    mtime = time.mktime((2024, 5, 17, 13, 45, 30, 0, 0, -1))
    info = _entry(mtime, stat.S_IFREG | 0o755).toZipInfo(CompressionLevel.BEST)

    assert info.filename == "proj/a.txt"
    assert info.date_time == (2024, 5, 17, 13, 45, 30)
    assert info.file_size == 10
    assert info.compress_type == zipfile.ZIP_DEFLATED
    assert stat.S_IMODE(info.external_attr >> 16) == 0o755
    assert stat.S_ISREG(info.external_attr >> 16)


def test_archive_entry_to_zip_info_store():
    info = _entry(time.time()).toZipInfo(CompressionLevel.STORE)
    assert info.compress_type == zipfile.ZIP_STORED


def test_archive_entry_to_zip_info_clamps_old_dates():
    mtime = time.mktime((1975, 6, 1, 12, 0, 0, 0, 0, -1))
    info = _entry(mtime).toZipInfo(CompressionLevel.DEFAULT)

    assert info.date_time == (1980, 1, 1, 0, 0, 0)


def test_archive_entry_is_immutable():
    entry = _entry(time.time())
    with pytest.raises(AttributeError):
        entry.key = "other"
