from .errors import (
    ConfigError,
    FirmwarenatorError,
    KernelLogError,
    PackagingError,
    PreflightError,
    StagingError,
    UsageError,
)
from .models import BuildResult, CompressorProfile, FirmwarePathSet, OutputFormat, RunConfig

__all__ = [
    "BuildResult",
    "CompressorProfile",
    "FirmwarePathSet",
    "OutputFormat",
    "RunConfig",
    "FirmwarenatorError",
    "UsageError",
    "ConfigError",
    "PreflightError",
    "KernelLogError",
    "StagingError",
    "PackagingError",
]
