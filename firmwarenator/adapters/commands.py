"""Blocking child-process helpers. Every external tool the build needs runs through here."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

log = logging.getLogger(__name__)


@dataclass
class CommandResult:
    command: list[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.return_code == 0

    def describe(self) -> str:
        text = f"{self.command[0]} exited with status {self.return_code}"
        tail = "\n".join((self.stderr or "").strip().splitlines()[-5:])
        return f"{text}: {tail}" if tail else text


def run_command(
    command: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    capture: bool = True,
) -> CommandResult:
    """
    Runs one command to completion. With capture=False the child inherits
    stdout/stderr, which is how verbose builder output reaches the user.
    A command that cannot be started reports status 127, like a shell would.
    """
    cmd = [str(c) for c in command]
    log.info("running: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            errors="replace",
            cwd=str(cwd) if cwd else None,
        )
    except OSError as e:
        return CommandResult(command=cmd, return_code=127, stderr=str(e))

    return CommandResult(
        command=cmd,
        return_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def run_pipeline(
    commands: Sequence[Sequence[str]],
    *,
    stdin_data: bytes,
    stdout: BinaryIO,
    cwd: Optional[Path] = None,
) -> list[CommandResult]:
    """
    Runs commands connected stdout -> stdin, feeding stdin_data to the first
    and writing the last one's output to stdout. stderr is inherited by all.
    Returns one result per stage, in order.
    """
    cmds = [[str(c) for c in command] for command in commands]
    log.info("running: %s", " | ".join(" ".join(c) for c in cmds))

    procs: list[subprocess.Popen] = []
    try:
        for i, cmd in enumerate(cmds):
            last = i == len(cmds) - 1
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdin=subprocess.PIPE if i == 0 else procs[-1].stdout,
                stdout=stdout if last else subprocess.PIPE,
            )
            if i > 0:
                # only the downstream process may hold the read end
                procs[-1].stdout.close()
            procs.append(proc)
    except OSError as e:
        for proc in procs:
            for pipe in (proc.stdin, proc.stdout):
                if pipe:
                    pipe.close()
            proc.kill()
            proc.wait()
        failed = cmds[len(procs)]
        results = [CommandResult(command=c, return_code=-9) for c in cmds[: len(procs)]]
        results.append(CommandResult(command=failed, return_code=127, stderr=str(e)))
        return results

    head = procs[0]
    try:
        head.stdin.write(stdin_data)
    except BrokenPipeError:
        # the head exited early; its status says why
        pass
    finally:
        head.stdin.close()

    return [CommandResult(command=cmd, return_code=proc.wait()) for cmd, proc in zip(cmds, procs)]
