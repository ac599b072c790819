from .image_service import FirmwareImageService
from .packagers import ArchivePackager, Packager, SquashfsPackager

__all__ = [
    "FirmwareImageService",
    "Packager",
    "ArchivePackager",
    "SquashfsPackager",
]
