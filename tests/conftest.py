from __future__ import annotations

import io
import re
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import pytest

from rpmci.commands import CommandResult, Toolchain
from rpmci.config import ToolPaths
from rpmci.specfile import SpecFile

Handler = Callable[[list[str]], "tuple[int, str]"]


class FakeRunner:
    """Stands in for `run_command`: records argv lists and answers from registered handlers."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self._handlers: list[tuple[tuple[str, ...], Handler]] = []

    def on(self, *prefix: str, stdout: str = "", returncode: int = 0, handler: Handler | None = None) -> None:
        """Answer commands whose argv (program basename first) starts with `prefix`. Latest wins."""
        respond = handler or (lambda _argv: (returncode, stdout))
        self._handlers.insert(0, (prefix, respond))

    def __call__(self, argv, *, cwd=None, env=None, check: bool = True) -> CommandResult:
        argv = list(argv)
        self.calls.append(argv)
        key = [Path(argv[0]).name, *argv[1:]]
        rc, stdout = 0, ""
        for prefix, respond in self._handlers:
            if tuple(key[: len(prefix)]) == prefix:
                rc, stdout = respond(argv)
                break
        result = CommandResult(tuple(argv), rc, stdout, "")
        return result.check() if check else result

    def called(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.calls if tuple([Path(c[0]).name, *c[1:]][: len(prefix)]) == prefix]


def _expand_macros(value: str, spec: SpecFile) -> str:
    name = spec.directive("Name") or ""
    version = spec.directive("Version") or ""
    return value.replace("%{name}", name).replace("%{version}", version)


def fake_rpm_query(argv: list[str]) -> tuple[int, str]:
    tag = re.search(r"%\{(\w+)\}", " ".join(argv)).group(1)
    spec = SpecFile.load(argv[-1])
    return 0, _expand_macros(spec.directive(tag) or "", spec) + "\n"


def fake_spectool(argv: list[str]) -> tuple[int, str]:
    spec = SpecFile.load(argv[-1])
    return 0, f"Source0: {_expand_macros(spec.directive('Source0') or '', spec)}\n"


def fake_git_archive(argv: list[str]) -> tuple[int, str]:
    fmt = next(a.split("=", 1)[1] for a in argv if a.startswith("--format="))
    prefix = next(a.split("=", 1)[1] for a in argv if a.startswith("--prefix="))
    output = Path(argv[argv.index("-o") + 1])
    payload = b"hello\n"
    if fmt == "zip":
        with zipfile.ZipFile(output, "w") as zf:
            zf.writestr(f"{prefix}README", payload)
    else:
        with tarfile.open(output, "w") as tf:
            info = tarfile.TarInfo(f"{prefix}README")
            info.size = len(payload)
            tf.addfile(info, io.BytesIO(payload))
    return 0, ""


@pytest.fixture
def runner() -> FakeRunner:
    r = FakeRunner()
    r.on("rpm", handler=fake_rpm_query)
    r.on("spectool", handler=fake_spectool)
    r.on("git", "archive", handler=fake_git_archive)
    r.on("git", "tag", stdout="")
    r.on("git", "describe", returncode=128)
    r.on("git", "log", stdout="abc1234")
    return r


@pytest.fixture
def tools(tmp_path: Path, runner: FakeRunner) -> Toolchain:
    return Toolchain(paths=ToolPaths(), cwd=tmp_path, runner=runner)


SPEC_TEMPLATE = """\
Name:           {name}
Version:        {version}
Release:        {release}%{{?dist}}
Summary:        Test package
License:        MIT
URL:            https://example.invalid/{name}
Source0:        {source0}

%description
Built by job @@JOB_NAME@@ #@@BUILD_NUMBER@@.

%prep
%setup -q

%files

%changelog
"""


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        *,
        name: str = "pkg",
        version: str = "1.0",
        release: str = "1",
        source0: str = "https://example.invalid/%{name}-%{version}.tar.gz",
    ) -> Path:
        path = tmp_path / f"{name}.spec"
        path.write_text(SPEC_TEMPLATE.format(name=name, version=version, release=release, source0=source0))
        return path

    return _write
