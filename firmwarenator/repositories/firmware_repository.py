from __future__ import annotations

import logging
import re
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Optional, Protocol

from firmwarenator.domain.errors import StagingError
from firmwarenator.domain.models import FirmwarePathSet

log = logging.getLogger(__name__)

# firmware_loader's dev_dbg() is "direct-loading <name>"; older kernels and
# some drivers print "Loading firmware from <name>".
FIRMWARE_LOAD_RE = re.compile(r"\bdirect-loading\b|\bLoading firmware from\b")

STAGING_PREFIX = "firmwarenator."
FIRMWARE_SUBDIR = PurePosixPath("lib/firmware")


class KernelLog(Protocol):
    def read_lines(self) -> list[str]: ...


def _firmware_name(line: str) -> Optional[str]:
    m = FIRMWARE_LOAD_RE.search(line)
    if not m:
        return None
    # last word of the line, and it must come after the marker
    words = line[m.end():].split()
    name = words[-1].strip("\"'") if words else ""
    return name or None


def _is_safe_relative(name: str) -> bool:
    p = PurePosixPath(name)
    return not p.is_absolute() and ".." not in p.parts


def parse_firmware_paths(lines: Iterable[str]) -> FirmwarePathSet:
    """Collects the firmware names from every load record; duplicates collapse."""
    found: set[str] = set()
    for line in lines:
        name = _firmware_name(line)
        if name is None:
            continue
        if not _is_safe_relative(name):
            log.warning("skipping firmware path outside the firmware directory: %s", name)
            continue
        found.add(name)
    return frozenset(found)


@contextmanager
def staging_root(prefix: str = STAGING_PREFIX) -> Iterator[Path]:
    """A fresh temporary directory, removed on every exit path."""
    with tempfile.TemporaryDirectory(prefix=prefix) as tmp:
        log.info("staging in %s", tmp)
        yield Path(tmp)


@dataclass
class FirmwareRepository:
    """
    Repository pattern: the kernel log on one side, the live firmware tree on the other.
    """
    firmware_dir: Path
    kernel_log: KernelLog

    def discover(self) -> FirmwarePathSet:
        paths = parse_firmware_paths(self.kernel_log.read_lines())
        if not paths:
            log.warning(
                "no firmware loads found in the kernel log; "
                "is firmware_loader dynamic debug enabled, and has the log rotated?"
            )
        else:
            log.info("found %d firmware files", len(paths))
        return paths

    def stage(self, paths: FirmwarePathSet, root: Path) -> Path:
        """
        Copies every path into <root>/lib/firmware, keeping its relative location.
        lib/firmware is created even when there is nothing to copy.
        """
        target_base = root / FIRMWARE_SUBDIR
        try:
            target_base.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"cannot create {target_base}: {e}") from e

        for rel in sorted(paths):
            source = self.firmware_dir / rel
            if not source.is_file():
                raise StagingError(f"firmware file not found: {source}")

            target = target_base / rel
            log.info("staging %s", rel)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                # follows symlinks: the image gets the content, not a dangling link
                shutil.copy2(source, target)
            except OSError as e:
                raise StagingError(f"cannot stage {rel}: {e}") from e

        return target_base
