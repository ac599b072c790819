from __future__ import annotations

from pathlib import Path

import pytest

from firmwarenator.cli.args import attach_option_values, parse_args
from firmwarenator.config.resolver import resolve_output_path, resolve_run_config
from firmwarenator.config.shell_config import ShellConfig
from firmwarenator.domain.errors import ConfigError, PreflightError, UsageError
from firmwarenator.domain.models import OutputFormat


def found(cmd: str) -> str:
    return f"/usr/bin/{cmd}"


def not_found(cmd: str):
    return None


def resolve(argv, config=None, environ=None, which=found):
    return resolve_run_config(
        parse_args(argv),
        config or ShellConfig([]),
        environ=environ if environ is not None else {},
        which=which,
    )


def test_defaults_resolve_to_zstd_archive(tmp_path: Path):
    out = tmp_path / "fw.cpio.zst"
    cfg = resolve([str(out)])

    assert cfg.output == out.resolve()
    assert cfg.output.is_absolute()
    assert cfg.format is OutputFormat.ARCHIVE
    assert cfg.compressor.name == "zstd"
    assert cfg.force is False
    assert cfg.verbose is False
    assert cfg.firmware_dir == Path("/lib/firmware")
    assert cfg.kernel_log_command == ("dmesg",)


def test_relative_imgname_becomes_absolute(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = resolve(["out.cpio"])
    assert cfg.output == tmp_path.resolve() / "out.cpio"


@pytest.mark.parametrize("argv", [[], [""], ["   "]])
def test_missing_imgname_is_a_usage_error(argv):
    with pytest.raises(UsageError) as exc:
        resolve(argv)
    assert str(exc.value) == "IMGNAME required."


def test_resolve_output_path_rejects_none():
    with pytest.raises(UsageError):
        resolve_output_path(None)


def test_unknown_option_is_a_usage_error():
    with pytest.raises(UsageError):
        parse_args(["--bogus", "out.img"])


def test_existing_output_without_force_fails(tmp_path: Path):
    out = tmp_path / "fw.img"
    out.write_bytes(b"old")
    with pytest.raises(PreflightError) as exc:
        resolve([str(out)])
    assert "file exists" in str(exc.value)


def test_existing_output_with_force_is_allowed(tmp_path: Path):
    out = tmp_path / "fw.img"
    out.write_bytes(b"old")
    cfg = resolve(["--force", str(out)])
    assert cfg.force is True
    # nothing destructive happens during resolution
    assert out.read_bytes() == b"old"


def test_output_in_missing_directory_fails(tmp_path: Path):
    with pytest.raises(PreflightError):
        resolve([str(tmp_path / "nope" / "fw.img")])


def test_output_that_is_a_directory_fails(tmp_path: Path):
    with pytest.raises(PreflightError):
        resolve(["-f", str(tmp_path)])


def test_cli_compressor_overrides_config_default(tmp_path: Path):
    user = tmp_path / "user.conf"
    user.write_text("COMPRESSOR=xz\n", encoding="utf-8")
    config = ShellConfig([user])

    assert resolve([str(tmp_path / "a")], config).compressor.name == "xz"
    assert resolve(["-c", "gzip", str(tmp_path / "b")], config).compressor.name == "gzip"


def test_repeated_compressor_args_append(tmp_path: Path):
    cfg = resolve(["-c", "xz", "-C", "-T0", "-C", "--check=crc32 -6", str(tmp_path / "o")])
    assert cfg.compressor.compress_args == ("-T0", "--check=crc32", "-6")


@pytest.mark.parametrize("group", ["-T0", "--long", "-q", "-9e", "-19"])
def test_compressor_args_may_start_with_a_dash(group):
    args = parse_args(["-c", "zstd", "-C", group, "out.img"])
    assert args.compressor_args == [group]
    assert args.imgname == "out.img"


@pytest.mark.parametrize("flag", ["-C", "--compressor-args"])
def test_compressor_args_long_and_short_forms(flag, tmp_path: Path):
    cfg = resolve(["-c", "zstd", flag, "--long", flag, "-T0", str(tmp_path / "o")])
    assert cfg.compressor.compress_args == ("--long", "-T0")


def test_attach_option_values_rewrites_only_compressor_args():
    assert attach_option_values(["-v", "-C", "-q", "-c", "xz", "out"]) == [
        "-v", "--compressor-args=-q", "-c", "xz", "out",
    ]
    # after "--" everything is positional
    assert attach_option_values(["--", "-C", "-q"]) == ["--", "-C", "-q"]


def test_trailing_compressor_args_flag_is_a_usage_error():
    with pytest.raises(UsageError):
        parse_args(["out.img", "-C"])


def test_unknown_compressor_is_a_config_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        resolve(["-c", "brotli", str(tmp_path / "o")])


def test_missing_compressor_executable_is_a_config_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        resolve(["-c", "lz4", str(tmp_path / "o")], which=not_found)


def test_sqsh_ignores_compressor_settings(tmp_path: Path):
    cfg = resolve(["-s", "-c", "brotli", str(tmp_path / "fw.sqsh")], which=not_found)
    assert cfg.format is OutputFormat.IMAGE
    assert cfg.compressor is None
    assert cfg.mksquashfs == "mksquashfs"
    assert cfg.squashfs_comp == "xz"


def test_config_and_environment_settings(tmp_path: Path):
    user = tmp_path / "user.conf"
    user.write_text(
        "DMESG='journalctl -k -b --no-pager'\nMKSQUASHFS=/opt/bin/mksquashfs\nSQUASHFS_COMP=zstd\n",
        encoding="utf-8",
    )
    cfg = resolve(
        ["-v", "-s", str(tmp_path / "fw.sqsh")],
        ShellConfig([user]),
        environ={"FIRMWARENATOR_FIRMWARE_DIR": str(tmp_path)},
    )
    assert cfg.verbose is True
    assert cfg.kernel_log_command == ("journalctl", "-k", "-b", "--no-pager")
    assert cfg.mksquashfs == "/opt/bin/mksquashfs"
    assert cfg.squashfs_comp == "zstd"
    assert cfg.firmware_dir == tmp_path
