from __future__ import annotations

from firmwarenator.adapters.kernel_log import KernelLogReader
from firmwarenator.domain.models import OutputFormat, RunConfig
from firmwarenator.repositories.firmware_repository import FirmwareRepository
from firmwarenator.services.image_service import FirmwareImageService
from firmwarenator.services.packagers import ArchivePackager, Packager, SquashfsPackager


def create_packager(config: RunConfig) -> Packager:
    if config.format is OutputFormat.IMAGE:
        return SquashfsPackager(
            verbose=config.verbose,
            mksquashfs=config.mksquashfs,
            compression=config.squashfs_comp,
        )
    return ArchivePackager(compressor=config.compressor, verbose=config.verbose)


def create_service(config: RunConfig) -> FirmwareImageService:
    firmware_repo = FirmwareRepository(
        firmware_dir=config.firmware_dir,
        kernel_log=KernelLogReader(command=config.kernel_log_command),
    )

    return FirmwareImageService(
        config=config,
        firmware_repo=firmware_repo,
        packager=create_packager(config),
    )


#############################
#
# Composition root
# •	cli/controller.py parses argv, loads ShellConfig, resolves a RunConfig.
# •	create_service() wires KernelLogReader -> FirmwareRepository -> FirmwareImageService.
# •	create_packager() picks the Strategy: ArchivePackager (cpio | compressor) or SquashfsPackager.
# •	Nothing below this point reads configuration; RunConfig is passed down explicitly.
######################################################################
