# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import shutil
import stat
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from zipper_lib.core.config import CFG
from zipper_lib.core.error import ZipperCancelledError, ZipperError
from zipper_lib.core.logger import get_logger

from .job import ArchiveEntry, ArchiveJob

logger = get_logger(__name__)


class Archiver:
    """
    Packages the inputs of an ArchiveJob into a single ZIP archive.

    Every distinct file reachable from the inputs is written exactly once.
    Files found inside a directory input are stored under their path relative
    to the parent of that directory, files provided directly are stored under
    their base name. When two files map to the same archive key, the one
    encountered first wins.
    """

    def __init__(self, job: ArchiveJob):
        """
        Initialize the Archiver.

        Args:
            job (ArchiveJob): The job to execute.
        """
        self._job = job
        self._output = Path(job.output).absolute()

    def run(self) -> list[ArchiveEntry]:
        """
        Create the archive.

        Problems with individual inputs (paths that cannot be resolved or
        inspected, files that vanished before being opened) are logged and
        skipped. The archive is finalized on every exit path.

        Returns:
            list[ArchiveEntry]: The entries written, in the order they were written.

        Raises:
            ZipperCancelledError: If the job was cancelled.
            ZipperError: If the archive cannot be created, finalized or written,
                if a file cannot be opened or if a directory walk fails.
        """
        logger.debug(f"Creating archive '{self._output}' from {self._job.inputs}.")

        try:
            file = self._output.open("wb")
        except OSError as e:
            raise ZipperError(f"Could not create archive '{self._job.output}': {e}.") from e

        written: list[ArchiveEntry] = []
        writer: zipfile.ZipFile | None = None
        try:
            writer = zipfile.ZipFile(
                file,
                "w",
                compression=self._job.level.method,
                compresslevel=self._job.level.zlibLevel,
            )
            seen: set[str] = set()
            for source in self._job.inputs:
                self._checkCancelled()
                for path, key in self._collect(source):
                    if key in seen:
                        logger.debug(f"Skipping '{path}': '{key}' is already archived.")
                        continue
                    if (entry := self._addFile(writer, path, key)) is not None:
                        written.append(entry)
                    seen.add(key)
        finally:
            # close errors are only reported here so that they never replace
            # an error raised during the traversal
            errors = self._finalize(writer, file)

        if errors:
            raise ZipperError(
                f"Could not finalize archive '{self._job.output}': {errors[0]}."
            ) from errors[0]

        logger.debug(f"Archived files: {[entry.key for entry in written]}.")
        logger.info(
            f"Created archive '{self._job.output}' with {len(written)} file{'' if len(written) == 1 else 's'}."
        )
        return written

    def _collect(self, source: str) -> Iterator[tuple[Path, str]]:
        """
        Yield the files reachable from a single input together with their archive keys.

        Args:
            source (str): A path to a file or directory as provided by the caller.

        Yields:
            tuple[Path, str]: Absolute path to the file and its archive key.

        Raises:
            ZipperError: If walking a directory input fails.
        """
        try:
            path = Path(os.path.abspath(source))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not get absolute path for '{source}': {e}.")
            return

        try:
            info = path.stat()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not stat '{source}': {e}.")
            return

        if not stat.S_ISDIR(info.st_mode):
            yield path, self._fileKey(path)
            return

        base = path.parent
        logger.debug(f"Skipping directory '{path}'.")
        try:
            for file in self._walk(path):
                yield file, file.relative_to(base).as_posix()
        except OSError as e:
            raise ZipperError(f"Could not walk directory '{source}': {e}.") from e

    def _walk(self, directory: Path) -> Iterator[Path]:
        """
        Depth-first walk yielding every non-directory descendant of `directory`.

        Entries are visited in lexical order of their names. Symbolic links are
        never followed into directories. The walk keeps its own stack, so the
        depth of the tree is not limited by the recursion limit.

        Raises:
            OSError: If a directory cannot be listed or an entry cannot be inspected.
            ZipperCancelledError: If the job was cancelled.
        """
        stack: list[tuple[Path, Iterator[os.DirEntry]]] = [
            (directory, Archiver._listDir(directory))
        ]

        while stack:
            parent, entries = stack[-1]
            if (entry := next(entries, None)) is None:
                stack.pop()
                continue

            self._checkCancelled()
            path = parent / entry.name
            if entry.is_dir(follow_symlinks=False):
                logger.debug(f"Skipping directory '{path}'.")
                stack.append((path, Archiver._listDir(path)))
            else:
                yield path

    @staticmethod
    def _listDir(directory: Path) -> Iterator[os.DirEntry]:
        """
        Return an iterator over the entries of `directory` sorted by name.
        """
        with os.scandir(directory) as it:
            return iter(sorted(it, key=lambda e: e.name))

    def _fileKey(self, path: Path) -> str:
        """
        Return the archive key of a file provided directly as an input.
        """
        if self._job.include_original:
            try:
                return path.relative_to(Path.cwd()).as_posix()
            except ValueError:
                logger.debug(
                    f"'{path}' is not inside the current directory, storing it under its name."
                )
        return path.name

    def _addFile(
        self, writer: zipfile.ZipFile, path: Path, key: str
    ) -> ArchiveEntry | None:
        """
        Stream a single file into the archive.

        Args:
            writer (zipfile.ZipFile): The open archive.
            path (Path): Absolute path to the file.
            key (str): The archive key to store the file under.

        Returns:
            ArchiveEntry | None: The written entry, or None if the file was skipped.

        Raises:
            ZipperCancelledError: If the job was cancelled.
            ZipperError: If the file cannot be opened or copied into the archive.
        """
        self._checkCancelled()

        try:
            if not path.exists():
                logger.warning(f"File '{path}' does not exist.")
                return None

            if not path.is_file():
                logger.warning(f"'{path}' is not a regular file.")
                return None
        except OSError as e:
            logger.warning(f"Could not inspect '{path}': {e}.")
            return None

        if self._isOutput(path):
            logger.warning(f"Skipping '{path}': it is the archive being created.")
            return None

        try:
            source = path.open("rb")
        except OSError as e:
            raise ZipperError(f"Could not open file '{path}': {e}.") from e

        with source:
            try:
                entry = ArchiveEntry.fromStat(path, key, os.fstat(source.fileno()))
                with writer.open(entry.toZipInfo(self._job.level), "w") as target:
                    Archiver._copy(source, target)
            except (OSError, RuntimeError, zipfile.LargeZipFile) as e:
                raise ZipperError(
                    f"Could not add file '{path}' to the archive: {e}."
                ) from e

        logger.info(f"Added: {key}")
        return entry

    def _isOutput(self, path: Path) -> bool:
        """
        Check whether `path` points to the archive that is being created.
        """
        try:
            return path.samefile(self._output)
        except OSError:
            return False

    def _checkCancelled(self) -> None:
        """
        Raise ZipperCancelledError if cancellation of the job was requested.
        """
        if self._job.cancel.is_set():
            raise ZipperCancelledError("Archive job was cancelled.")

    @staticmethod
    def _copy(source: BinaryIO, target: BinaryIO) -> None:
        """
        Copy the contents of `source` to `target` using a bounded buffer.
        """
        shutil.copyfileobj(source, target, CFG.archiver.buffer_size)

    def _finalize(
        self, writer: zipfile.ZipFile | None, file: BinaryIO
    ) -> list[Exception]:
        """
        Close the archive writer and then the underlying archive file.

        Both are always attempted. Errors are logged and returned, not raised.

        Returns:
            list[Exception]: Errors encountered while closing, in order.
        """
        errors = []
        for resource, what in ((writer, "archive"), (file, "archive file")):
            if resource is None:
                continue
            try:
                resource.close()
            except (OSError, ValueError) as e:
                logger.error(f"Error closing {what} '{self._job.output}': {e}.")
                errors.append(e)

        return errors
