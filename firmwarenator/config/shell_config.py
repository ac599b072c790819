########## shell_config.py

from __future__ import annotations

import os
import re
import shlex
import shutil
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from firmwarenator.domain.errors import ConfigError
from firmwarenator.domain.models import CompressorProfile

SYSTEM_CONFIG_DEFAULT = "/etc/firmwarenator.conf"
USER_CONFIG_NAME = ".firmwarenator"

DEFAULT_COMPRESSOR = "zstd"

# Built-in layer, overridden by the system config, then the user config.
BUILTIN_DEFAULTS: dict[str, str] = {
    "COMPRESSOR": DEFAULT_COMPRESSOR,
    "DMESG": "dmesg",
    "MKSQUASHFS": "mksquashfs",
    "SQUASHFS_COMP": "xz",

    "NONE_COMP": "cat",
    "NONE_COMP_ARGS": "",
    "NONE_DECOMP": "cat",

    "GZIP_COMP": "gzip",
    "GZIP_COMP_ARGS": "-9 -n",
    "GZIP_DECOMP": "gzip -dc",

    "BZIP2_COMP": "bzip2",
    "BZIP2_COMP_ARGS": "-9",
    "BZIP2_DECOMP": "bzip2 -dc",

    # the kernel's xz decoder only understands crc32 checks
    "XZ_COMP": "xz",
    "XZ_COMP_ARGS": "--check=crc32 -9",
    "XZ_DECOMP": "xz -dc",

    "LZMA_COMP": "lzma",
    "LZMA_COMP_ARGS": "-9",
    "LZMA_DECOMP": "lzma -dc",

    "LZOP_COMP": "lzop",
    "LZOP_COMP_ARGS": "-9",
    "LZOP_DECOMP": "lzop -dc",

    # legacy frame format, the only one early userspace unpacks
    "LZ4_COMP": "lz4",
    "LZ4_COMP_ARGS": "-l -9",
    "LZ4_DECOMP": "lz4 -dc",

    "ZSTD_COMP": "zstd",
    "ZSTD_COMP_ARGS": "-q -19",
    "ZSTD_DECOMP": "zstd -dcq",
}

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_COMPRESSOR_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def parse_shell_assignments(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parses the NAME=VALUE lines a shell would have sourced.
    Quoting and comments follow shell rules; ``export`` is accepted and ignored.
    Variable references are kept literally.
    """
    values: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        try:
            words = shlex.split(line, comments=True, posix=True)
        except ValueError as e:
            raise ConfigError(f"{source}:{lineno}: {e}") from e

        if words and words[0] == "export":
            words = words[1:]
        for word in words:
            name, sep, value = word.partition("=")
            if not sep or not _NAME_RE.match(name):
                raise ConfigError(f"{source}:{lineno}: not a variable assignment: {word!r}")
            values[name] = value
    return values


def split_words(raw: str) -> tuple[str, ...]:
    try:
        return tuple(shlex.split(raw))
    except ValueError as e:
        raise ConfigError(f"cannot split {raw!r}: {e}") from e


class ShellConfig:
    """
    Layered lookup over the built-in defaults and any config files that exist.
    Later layers override earlier ones for the same variable.
    """

    def __init__(self, sources: Iterable[Path] = (), defaults: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(BUILTIN_DEFAULTS if defaults is None else defaults)
        self._loaded: list[Path] = []
        for path in sources:
            self._load(Path(path))

    @staticmethod
    def default_sources() -> list[Path]:
        system_raw = (os.getenv("FIRMWARENATOR_SYSTEM_CONFIG") or "").strip() or SYSTEM_CONFIG_DEFAULT
        user_raw = (os.getenv("FIRMWARENATOR_USER_CONFIG") or "").strip()
        user = Path(os.path.expanduser(user_raw)) if user_raw else Path.home() / USER_CONFIG_NAME
        return [Path(system_raw), user]

    @staticmethod
    def from_env_or_default() -> "ShellConfig":
        return ShellConfig(ShellConfig.default_sources())

    @property
    def loaded_sources(self) -> Sequence[Path]:
        return tuple(self._loaded)

    def _load(self, path: Path) -> None:
        if not path.is_file():
            return
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e}") from e
        self._values.update(parse_shell_assignments(text, source=str(path)))
        self._loaded.append(path)

    def get(self, name: str) -> Optional[str]:
        """Returns the value, or None when unset or blank."""
        raw = (self._values.get(name) or "").strip()
        return raw or None

    def default_compressor(self) -> str:
        return self.get("COMPRESSOR") or DEFAULT_COMPRESSOR

    def compressor_profile(
        self,
        name: str,
        args_override: Optional[Sequence[str]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> CompressorProfile:
        """
        Looks up <NAME>_COMP, <NAME>_COMP_ARGS and <NAME>_DECOMP.
        args_override (the -C groups) replaces the configured arguments entirely.
        """
        name = (name or "").strip()
        if not _COMPRESSOR_NAME_RE.match(name):
            raise ConfigError(f"invalid compressor name: {name!r}")

        key = name.upper()
        comp = self.get(f"{key}_COMP")
        decomp = self.get(f"{key}_DECOMP")
        if comp is None or decomp is None:
            raise ConfigError(f"unknown compressor: {name} ({key}_COMP / {key}_DECOMP not configured)")

        if args_override:
            comp_args = split_words(" ".join(args_override))
        else:
            comp_args = split_words(self.get(f"{key}_COMP_ARGS") or "")

        comp_words = split_words(comp)
        decomp_words = split_words(decomp)
        if not comp_words or not decomp_words:
            raise ConfigError(f"unknown compressor: {name}")

        for command in (comp_words[0], decomp_words[0]):
            if not which(command):
                raise ConfigError(f"{name}: command not found: {command}")

        # extra words in <NAME>_COMP are leading arguments
        return CompressorProfile(
            name=name,
            compress=comp_words[0],
            compress_args=comp_words[1:] + comp_args,
            decompress=decomp,
        )
