from __future__ import annotations

import logging
from dataclasses import dataclass

from firmwarenator.adapters.commands import run_command
from firmwarenator.domain.errors import KernelLogError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class KernelLogReader:
    """Reads the kernel ring buffer once through the configured reader (dmesg by default)."""

    command: tuple[str, ...] = ("dmesg",)

    def read_lines(self) -> list[str]:
        result = run_command(self.command)
        if not result.success:
            raise KernelLogError(f"cannot read kernel log: {result.describe()}")
        lines = result.stdout.splitlines()
        log.info("kernel log: %d lines", len(lines))
        return lines
