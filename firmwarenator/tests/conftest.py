from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest


def requires(*tools: str):
    missing = [t for t in tools if shutil.which(t) is None]
    return pytest.mark.skipif(bool(missing), reason=f"not installed: {', '.join(missing)}")


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # controller.main() reconfigures the root logger against the captured stderr
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def firmware_dir(tmp_path: Path) -> Path:
    fw = tmp_path / "lib-firmware"
    (fw / "ath10k").mkdir(parents=True)
    (fw / "iwlwifi-1.ucode").write_bytes(b"\x00iwlwifi ucode\xff")
    (fw / "ath10k" / "cal-pci.bin").write_bytes(b"ath10k calibration data")
    (fw / "unused.bin").write_bytes(b"never loaded")
    return fw


@pytest.fixture
def dmesg_lines() -> list[str]:
    return [
        "[    0.000000] Linux version 6.1.0 (gcc) #1 SMP",
        '[    1.234000] usb 1-1: Loading firmware from "iwlwifi-1.ucode"',
        '[    1.250000] usb 1-1: Loading firmware from "iwlwifi-1.ucode"',
        "[    2.000000] ath10k_pci 0000:01:00.0: firmware_class: direct-loading ath10k/cal-pci.bin",
        "[    2.100000] ath10k_pci 0000:01:00.0: Direct firmware load for ath10k/board-2.bin failed with error -2",
    ]
