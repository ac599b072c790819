from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from firmwarenator.adapters.commands import run_command, run_pipeline
from firmwarenator.domain.errors import PackagingError
from firmwarenator.domain.models import CompressorProfile
from firmwarenator.repositories.firmware_repository import FIRMWARE_SUBDIR

log = logging.getLogger(__name__)


class Packager:
    """Strategy interface: turn a staging root into the output file."""
    def package(self, staging_root: Path, output: Path) -> None:
        raise NotImplementedError


def archive_listing(staging_root: Path) -> list[str]:
    """Every entry under <root>/lib, relative to root, parents before children."""
    top = staging_root / FIRMWARE_SUBDIR.parts[0]
    entries = [top, *top.rglob("*")]
    return sorted(p.relative_to(staging_root).as_posix() for p in entries)


@dataclass(frozen=True)
class ArchivePackager(Packager):
    compressor: CompressorProfile
    verbose: bool = False
    cpio: str = "cpio"

    def cpio_argv(self) -> list[str]:
        argv = [self.cpio, "--null", "-o", "-H", "newc", "-R", "0:0"]
        argv.append("-v" if self.verbose else "--quiet")
        return argv

    def package(self, staging_root: Path, output: Path) -> None:
        listing = archive_listing(staging_root)
        stdin_data = b"".join(name.encode() + b"\0" for name in listing)

        stages = [self.cpio_argv()]
        if not self.compressor.passthrough:
            stages.append(self.compressor.compress_argv())

        try:
            with open(output, "wb") as out:
                results = run_pipeline(stages, stdin_data=stdin_data, stdout=out, cwd=staging_root)
        except OSError as e:
            output.unlink(missing_ok=True)
            raise PackagingError(f"cannot write {output}: {e}") from e

        failed = next((r for r in results if not r.success), None)
        if failed is not None:
            output.unlink(missing_ok=True)
            raise PackagingError(failed.describe(), returncode=failed.return_code)

        log.info("wrote %d archive entries to %s", len(listing), output)


@dataclass(frozen=True)
class SquashfsPackager(Packager):
    """
    The image root is the *contents* of lib/firmware, unlike the archive which
    keeps the lib/firmware prefix. Both layouts are what their consumers expect
    today, so the difference stays.
    """
    verbose: bool = False
    mksquashfs: str = "mksquashfs"
    compression: str = "xz"

    def mksquashfs_argv(self, source: Path, output: Path) -> list[str]:
        argv = [
            self.mksquashfs, str(source), str(output),
            "-comp", self.compression,
            "-noappend",
            "-all-root",
        ]
        if not self.verbose:
            argv.append("-no-progress")
        return argv

    def package(self, staging_root: Path, output: Path) -> None:
        source = staging_root / FIRMWARE_SUBDIR
        result = run_command(self.mksquashfs_argv(source, output), capture=not self.verbose)
        if not result.success:
            raise PackagingError(result.describe(), returncode=result.return_code)
        log.info("wrote squashfs image %s", output)
