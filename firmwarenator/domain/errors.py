######## errors.py
########

from __future__ import annotations


class FirmwarenatorError(Exception):
    """Base class for every failure that ends a run with exit status 1."""

    exit_code = 1
    show_usage = False


class UsageError(FirmwarenatorError):
    show_usage = True


class ConfigError(FirmwarenatorError):
    show_usage = True


class PreflightError(FirmwarenatorError):
    """Output path checks failed before any staging work started."""


class KernelLogError(FirmwarenatorError):
    pass


class StagingError(FirmwarenatorError):
    pass


class PackagingError(FirmwarenatorError):
    """
    An external builder or compressor failed. returncode is the tool's own
    status, kept for messages and callers; the run still exits with exit_code.
    """

    def __init__(self, message: str, returncode: int = 1):
        super().__init__(message)
        self.returncode = returncode
