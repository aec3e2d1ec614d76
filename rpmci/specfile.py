"""
specfile.py

Responsibility: the in-memory model of an RPM description (.spec) file.

`SpecFile` is immutable; every transformation returns a new instance and the
text reaches disk only through `save()`. Values that need rpm macro expansion
(name, version, release, Source0) are obtained by querying rpm/spectool
against a short-lived copy of the current in-memory text, so queries always see
the substitutions made so far without writing the real file.
"""

from __future__ import annotations

import os
import posixpath
import re
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterator, Mapping

from rpmci.commands import Toolchain
from rpmci.errors import BuildError
from rpmci.renderer import render_tokens


class SpecFileError(BuildError):
    pass


def _directive_re(name: str) -> re.Pattern[str]:
    return re.compile(rf"^({re.escape(name)}:)(.*)$", re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class SpecFile:
    """A description file: where it lives and its current (possibly unsaved) text."""

    path: Path
    text: str

    @classmethod
    def load(cls, path: str | Path) -> "SpecFile":
        p = Path(path)
        if not p.is_file():
            raise SpecFileError(f"could not open spec file: {p}")
        return cls(path=p, text=p.read_text(encoding="utf-8"))

    def save(self) -> None:
        self.path.write_text(self.text, encoding="utf-8")

    def directive(self, name: str) -> str | None:
        """Raw value of the first `Name:` line, or None."""
        m = _directive_re(name).search(self.text)
        return m.group(2).strip() if m else None

    def has_placeholder(self, name: str, token: str) -> bool:
        value = self.directive(name)
        return value is not None and f"@@{token}@@" in value

    def render(self, tokens: Mapping[str, Any]) -> "SpecFile":
        return replace(self, text=render_tokens(self.text, tokens))

    def append_version_suffix(self, suffix: str) -> "SpecFile":
        """Append `.suffix` to the Version line, ignoring its trailing whitespace."""
        pattern = re.compile(r"^(Version:.*?)[ \t]*$", re.IGNORECASE | re.MULTILINE)
        text, count = pattern.subn(lambda m: f"{m.group(1)}.{suffix}", self.text, count=1)
        if not count:
            raise SpecFileError(f"no Version: line in {self.path}")
        return replace(self, text=text)

    @contextmanager
    def staged(self) -> Iterator[Path]:
        """Yield a temporary on-disk copy of the current text, beside the real file."""
        fd, name = tempfile.mkstemp(prefix=f".{self.path.stem}-", suffix=".spec", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self.text)
            yield Path(name)
        finally:
            Path(name).unlink(missing_ok=True)


def query_tag(spec: SpecFile, tag: str, tools: Toolchain) -> str:
    """
    Return the first line of `rpm -q --queryformat %{tag} --specfile`.

    An rpm failure yields an empty string; callers decide whether that is fatal.
    """
    with spec.staged() as staged:
        result = tools.run(
            "rpm", "-q", f"--queryformat=%{{{tag}}}\\n", "--specfile", str(staged), check=False
        )
    if not result.ok:
        return ""
    return result.first_line()


def source0_filename(spec: SpecFile, tools: Toolchain) -> str:
    """Base name of the Source0 URL as listed by `spectool -l`."""
    with spec.staged() as staged:
        result = tools.run("spectool", "-l", str(staged))
    for line in result.stdout.splitlines():
        key, _, value = line.partition(":")
        if key.strip().lower() == "source0":
            # `url#/name.tar.gz` names the download after the fragment
            return posixpath.basename(value.strip().rstrip("/"))
    raise SpecFileError(f"no Source0 found in {spec.path}")
