# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import signal
import sys
from types import FrameType
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup

from zipper_lib.archive import ArchiveEntry, Archiver, ArchiveJob, CompressionLevel
from zipper_lib.core.config import CFG
from zipper_lib.core.error import ZipperError
from zipper_lib.core.logger import get_logger

__version__ = "0.2.0"

logger = get_logger(__name__)

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.command(
    short_help="Package files and directories into a ZIP archive.",
    help=f"""Package files and directories into a single ZIP archive.

{click.style("PATHS", fg="green")}   Files and directories to archive. At least one is required.

Files inside a directory are stored under their path relative to the parent of that directory,
so `{CFG.binary_name} proj` stores `proj/a.txt` and `proj/sub/b.txt`. Files provided directly are stored under their name.

Every archive path is written only once: if several inputs produce the same path, the first one wins.
Inputs that do not exist are reported and skipped. Directories are archived in full, no files are excluded.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
    help_headers_color="white",
    context_settings=_CONTEXT_SETTINGS,
)
@click.argument(
    "paths",
    type=str,
    nargs=-1,
    metavar=click.style("PATHS", fg="green"),
)
@optgroup.group(f"{click.style('Archive settings', fg='yellow')}")
@optgroup.option(
    "-o",
    "--output",
    type=str,
    default=CFG.archiver.default_output,
    show_default=True,
    help="Path to the archive to create. An existing file is overwritten.",
)
@optgroup.option(
    "-l",
    "--level",
    type=click.Choice([str(x) for x in CompressionLevel], case_sensitive=False),
    default=CFG.archiver.default_level,
    show_default=True,
    help="Compression of the archived files. `store` writes them uncompressed.",
)
@optgroup.option(
    "--include-original",
    is_flag=True,
    default=False,
    help="Store files provided directly under their path relative to the current directory instead of under their name.",
)
@click.option(
    "--version",
    is_flag=True,
    help=f"Print the current version of {CFG.binary_name} and exit.",
)
def cli(
    paths: tuple[str, ...],
    output: str,
    level: str,
    include_original: bool,
    version: bool,
) -> NoReturn:
    """
    Package the provided files and directories into a ZIP archive.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if not paths:
        raise click.UsageError("At least one file or directory must be provided.")

    try:
        job = ArchiveJob(
            inputs=list(paths),
            output=output,
            level=CompressionLevel.fromStr(level),
            include_original=include_original,
        )
        _run_job(job)
        sys.exit(0)
    except ZipperError as e:
        logger.error(e)
        sys.exit(e.exit_code)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _run_job(job: ArchiveJob) -> list[ArchiveEntry]:
    """
    Run the archive job, cancelling it on SIGINT.

    The previous SIGINT handler is restored once the job finishes.
    """

    def handle_sigint(_signum: int, _frame: FrameType | None) -> None:
        logger.warning("Received SIGINT, stopping after the current file.")
        job.cancel.set()

    previous = signal.signal(signal.SIGINT, handle_sigint)
    try:
        return Archiver(job).run()
    finally:
        signal.signal(signal.SIGINT, previous)
