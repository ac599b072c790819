from .firmware_repository import FirmwareRepository, parse_firmware_paths, staging_root

__all__ = [
    "FirmwareRepository",
    "parse_firmware_paths",
    "staging_root",
]
