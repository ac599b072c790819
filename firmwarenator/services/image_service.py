from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from firmwarenator.domain.errors import PackagingError, PreflightError
from firmwarenator.domain.models import BuildResult, RunConfig
from firmwarenator.repositories.firmware_repository import FirmwareRepository, staging_root
from firmwarenator.services.packagers import Packager

log = logging.getLogger(__name__)


@dataclass
class FirmwareImageService:
    """
    Service layer: discovery -> staging -> packaging, in that order, once.
    """
    config: RunConfig
    firmware_repo: FirmwareRepository
    packager: Packager

    def run(self) -> BuildResult:
        output = self.config.output

        # the resolver already checked; the file may have appeared since
        if output.exists() and not self.config.force:
            raise PreflightError(f"{output}: file exists (use --force to overwrite)")

        started = time.monotonic()
        paths = self.firmware_repo.discover()

        with staging_root() as root:
            self.firmware_repo.stage(paths, root)
            self._remove_previous(output)
            self.packager.package(root, output)

        return BuildResult(
            output=output,
            format=self.config.format,
            file_count=len(paths),
            duration_seconds=time.monotonic() - started,
        )

    @staticmethod
    def _remove_previous(output: Path) -> None:
        if output.exists():
            log.info("removing existing %s", output)
            try:
                output.unlink()
            except OSError as e:
                raise PackagingError(f"cannot remove {output}: {e}") from e
