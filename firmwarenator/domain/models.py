######## models.py
########

from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional

# Relative paths under the firmware directory, as named in the kernel log.
FirmwarePathSet = FrozenSet[str]

PASSTHROUGH_COMPRESSOR = "none"


class OutputFormat(str, Enum):
    ARCHIVE = "archive"   # cpio stream piped through a compressor
    IMAGE = "image"       # squashfs filesystem image


@dataclass(frozen=True)
class CompressorProfile:
    name: str
    compress: str
    compress_args: tuple[str, ...]
    decompress: str             # full command line, e.g. "zstd -dcq"

    @property
    def passthrough(self) -> bool:
        return self.name.lower() == PASSTHROUGH_COMPRESSOR

    def compress_argv(self) -> list[str]:
        return [self.compress, *self.compress_args]

    def decompress_argv(self) -> list[str]:
        return shlex.split(self.decompress)


@dataclass(frozen=True)
class RunConfig:
    output: Path
    force: bool
    verbose: bool
    format: OutputFormat

    # None for OutputFormat.IMAGE: mksquashfs brings its own compression
    compressor: Optional[CompressorProfile]

    firmware_dir: Path
    kernel_log_command: tuple[str, ...]
    mksquashfs: str
    squashfs_comp: str


@dataclass(frozen=True)
class BuildResult:
    output: Path
    format: OutputFormat
    file_count: int
    duration_seconds: float
