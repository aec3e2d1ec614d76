"""
commands.py

Responsibility: the single place where external processes are started.

Every tool the pipeline drives (rpm, rpmbuild, rpmlint, spectool, mock,
createrepo, git) is called through `run_command`, which returns a typed
`CommandResult` instead of relying on shell exit-status truthiness:
- argv lists only, never shell strings
- stdout/stderr are always captured
- `check=True` turns a nonzero exit into `CommandError` with the captured output
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

from rpmci.errors import BuildError

if TYPE_CHECKING:
    from rpmci.config import ToolPaths

logger = logging.getLogger(__name__)


class CommandError(BuildError):
    def __init__(self, argv: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        output = "\n".join(part for part in (stdout.strip(), stderr.strip()) if part)
        super().__init__(f"Command failed ({returncode}): {' '.join(self.argv)}\n\n{output}".rstrip())


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def first_line(self) -> str:
        for line in self.stdout.splitlines():
            return line.strip()
        return ""

    def check(self) -> "CommandResult":
        if not self.ok:
            raise CommandError(self.argv, self.returncode, self.stdout, self.stderr)
        return self


Runner = Callable[..., CommandResult]


def run_command(
    argv: Sequence[str],
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> CommandResult:
    """
    Run `argv` to completion and return its result.

    A missing executable is reported like a shell would, as exit status 127.
    """
    logger.debug("running: %s", " ".join(argv))
    try:
        proc = subprocess.run(
            list(argv),
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
        result = CommandResult(tuple(argv), proc.returncode, proc.stdout, proc.stderr)
    except FileNotFoundError as e:
        result = CommandResult(tuple(argv), 127, "", str(e))

    if result.stderr.strip():
        logger.debug("%s stderr:\n%s", argv[0], result.stderr.rstrip())
    return result.check() if check else result


@dataclass(frozen=True)
class Toolchain:
    """Resolves tool names to configured executables and runs them in the working directory."""

    paths: "ToolPaths"
    cwd: Path
    runner: Runner = run_command

    def run(self, tool: str, *args: str, check: bool = True) -> CommandResult:
        executable = getattr(self.paths, tool)
        return self.runner([executable, *args], cwd=self.cwd, check=check)
