from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from firmwarenator.app_factory import create_service
from firmwarenator.cli.args import PROG, attach_option_values, build_parser
from firmwarenator.config.resolver import resolve_run_config
from firmwarenator.config.shell_config import ShellConfig
from firmwarenator.domain.errors import FirmwarenatorError
from firmwarenator.domain.models import RunConfig

log = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=f"{PROG}: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def echo_settings(config: RunConfig, shell_config: ShellConfig) -> None:
    for source in shell_config.loaded_sources:
        log.info("config file: %s", source)
    log.info("output: %s", config.output)
    log.info("force: %s", config.force)
    log.info("format: %s", config.format.value)
    if config.compressor is not None:
        log.info("compressor: %s", config.compressor.name)
        log.info("compressor command: %s", " ".join(config.compressor.compress_argv()))
        log.info("decompressor command: %s", config.compressor.decompress)
    else:
        log.info("squashfs compression: %s", config.squashfs_comp)
    log.info("firmware dir: %s", config.firmware_dir)
    log.info("kernel log: %s", " ".join(config.kernel_log_command))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    try:
        # -h / -V exit from inside parse_args with status 0
        args = parser.parse_args(attach_option_values(argv))
        setup_logging(args.verbose)

        shell_config = ShellConfig.from_env_or_default()
        config = resolve_run_config(args, shell_config)
        echo_settings(config, shell_config)

        result = create_service(config).run()
    except FirmwarenatorError as e:
        if e.show_usage:
            parser.print_usage(sys.stderr)
        print(f"{PROG}: error: {e}", file=sys.stderr)
        return e.exit_code

    log.info(
        "%s: %d firmware files, %s, %.1fs",
        result.output, result.file_count, result.format.value, result.duration_seconds,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
