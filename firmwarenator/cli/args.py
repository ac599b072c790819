from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from firmwarenator import __version__
from firmwarenator.domain.errors import UsageError

PROG = "firmwarenator"

DESCRIPTION = (
    "Build an image of only the firmware files the running kernel loaded, "
    "as recorded in the kernel log."
)

EPILOG = """\
The firmware loader only logs what it loads when its dynamic debug output is
enabled, e.g. by booting with:

    dyndbg="file drivers/base/firmware_loader/main.c +p"

Read the log soon after boot, before the ring buffer rotates.

Configuration is read from /etc/firmwarenator.conf, then ~/.firmwarenator
(shell-style NAME=VALUE lines). COMPRESSOR sets the default compressor;
each compressor NAME is described by NAME_COMP, NAME_COMP_ARGS and
NAME_DECOMP (NAME upper-cased). Built in: none gzip bzip2 xz lzma lzop lz4 zstd.
"""


class ArgumentParser(argparse.ArgumentParser):
    """argparse exits with status 2 on bad usage; we report it as UsageError instead."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="echo resolved settings and run sub-commands verbosely",
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="overwrite IMGNAME if it exists",
    )
    parser.add_argument(
        "-c", "--compressor",
        metavar="NAME",
        default=None,
        help="compressor for the archive (default: zstd, or COMPRESSOR from config)",
    )
    parser.add_argument(
        "-C", "--compressor-args",
        metavar="ARGS",
        dest="compressor_args",
        action="append",
        default=None,
        help="compressor arguments; replaces the configured ones, repeat to append",
    )
    parser.add_argument(
        "-s", "--sqsh",
        action="store_true",
        help="build a squashfs image instead of a cpio archive",
    )
    parser.add_argument(
        "imgname",
        metavar="IMGNAME",
        nargs="?",
        help="output file",
    )
    return parser


COMPRESSOR_ARGS_FLAGS = ("-C", "--compressor-args")


def attach_option_values(argv: Optional[Sequence[str]] = None) -> list[str]:
    """
    -C always takes the next word as its value, even when it starts with a dash
    ("-C -T0", "-C --long"). argparse would read such a word as another option,
    so the pair is rewritten to "--compressor-args=<word>" before parsing.
    """
    words = list(sys.argv[1:] if argv is None else argv)
    out: list[str] = []
    i = 0
    while i < len(words):
        word = words[i]
        if word == "--":
            out.extend(words[i:])
            break
        if word in COMPRESSOR_ARGS_FLAGS and i + 1 < len(words):
            out.append(f"--compressor-args={words[i + 1]}")
            i += 2
            continue
        out.append(word)
        i += 1
    return out


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(attach_option_values(argv))
