from __future__ import annotations

import argparse
import os
import shutil
from pathlib import Path
from typing import Callable, Mapping, Optional

from firmwarenator.config.shell_config import ShellConfig, split_words
from firmwarenator.domain.errors import ConfigError, PreflightError, UsageError
from firmwarenator.domain.models import OutputFormat, RunConfig

FIRMWARE_DIR_DEFAULT = "/lib/firmware"


def resolve_output_path(raw: Optional[str]) -> Path:
    raw = (raw or "").strip()
    if not raw:
        raise UsageError("IMGNAME required.")
    try:
        return Path(os.path.expanduser(raw)).resolve()
    except (OSError, RuntimeError, ValueError) as e:
        raise UsageError("IMGNAME required.") from e


def check_output_path(output: Path, force: bool) -> None:
    """Pre-flight checks; nothing has been created when these fail."""
    if output.is_dir():
        raise PreflightError(f"{output}: is a directory")
    if not output.parent.is_dir():
        raise PreflightError(f"{output.parent}: no such directory")
    if output.exists() and not force:
        raise PreflightError(f"{output}: file exists (use --force to overwrite)")


def resolve_run_config(
    args: argparse.Namespace,
    config: ShellConfig,
    *,
    environ: Optional[Mapping[str, str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> RunConfig:
    """
    Combines parsed CLI arguments with the layered configuration.
    CLI flags win over the config files, which win over the built-in defaults.
    """
    environ = os.environ if environ is None else environ

    output = resolve_output_path(args.imgname)

    fmt = OutputFormat.IMAGE if args.sqsh else OutputFormat.ARCHIVE
    compressor = None
    if fmt is OutputFormat.ARCHIVE:
        name = args.compressor or config.default_compressor()
        compressor = config.compressor_profile(name, args.compressor_args, which=which)

    kernel_log_command = split_words(config.get("DMESG") or "dmesg")
    if not kernel_log_command:
        raise ConfigError("DMESG is empty")

    firmware_dir_raw = (environ.get("FIRMWARENATOR_FIRMWARE_DIR") or "").strip() or FIRMWARE_DIR_DEFAULT

    check_output_path(output, args.force)

    return RunConfig(
        output=output,
        force=args.force,
        verbose=args.verbose,
        format=fmt,
        compressor=compressor,
        firmware_dir=Path(firmware_dir_raw),
        kernel_log_command=kernel_log_command,
        mksquashfs=config.get("MKSQUASHFS") or "mksquashfs",
        squashfs_comp=config.get("SQUASHFS_COMP") or "xz",
    )
