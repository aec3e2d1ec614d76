"""
archive.py

Responsibility: make sure the Source0 archive exists in the working directory.

If the expected file is missing it is synthesized from git HEAD with a single
top-level directory `<name>-<version>/`. The archive format comes from what is
left of the expected filename after the `<name>-<version>` prefix.
"""

from __future__ import annotations

import bz2
import gzip
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rpmci import vcs
from rpmci.commands import Toolchain
from rpmci.logs import banner

logger = logging.getLogger(__name__)


class ArchiveFormat(Enum):
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    TAR = "tar"
    ZIP = "zip"

    @classmethod
    def from_suffix(cls, suffix: str) -> "ArchiveFormat | None":
        if suffix.endswith("tar.gz") or suffix.endswith("tgz"):
            return cls.TAR_GZ
        if suffix.endswith("tar.bz2"):
            return cls.TAR_BZ2
        if suffix.endswith("tar"):
            return cls.TAR
        if suffix.endswith("zip"):
            return cls.ZIP
        return None


@dataclass(frozen=True)
class ArchiveResult:
    path: Path
    suffix: str
    created: bool = False
    format: ArchiveFormat | None = None

    @property
    def exists(self) -> bool:
        return self.path.is_file()


def archive_suffix(filename: str, name: str, version: str) -> str:
    """`pkg-1.0.tar.gz` -> `.tar.gz` for name `pkg`, version `1.0`."""
    return filename.replace(f"{name}-{version}", "", 1)


def _compress(src: Path, dst: Path, opener) -> None:
    with src.open("rb") as fin, opener(dst, "wb") as fout:
        shutil.copyfileobj(fin, fout)
    src.unlink()


def build_source_archive(
    *,
    expected: str,
    name: str,
    version: str,
    tools: Toolchain,
) -> ArchiveResult:
    workdir = Path(tools.cwd)
    target = workdir / expected
    suffix = archive_suffix(expected, name, version)
    if target.is_file():
        logger.info("using existing source archive %s", expected)
        return ArchiveResult(path=target, suffix=suffix)

    banner(logger, "building upstream source archive from vcs repo")
    base = f"{name}-{version}"
    prefix = f"{base}/"
    fmt = ArchiveFormat.from_suffix(suffix)

    if fmt is None:
        logger.error("failed to make archive: unrecognized suffix %r in %s", suffix, expected)
        return ArchiveResult(path=target, suffix=suffix)

    logger.info("making %s called %s%s", fmt.value, base, suffix)
    if fmt is ArchiveFormat.TAR or fmt is ArchiveFormat.ZIP:
        vcs.archive_head(tools, fmt=fmt.value, prefix=prefix, output=target)
        return ArchiveResult(path=target, suffix=suffix, created=True, format=fmt)

    tar = workdir / f"{base}.tar"
    vcs.archive_head(tools, fmt="tar", prefix=prefix, output=tar)
    if fmt is ArchiveFormat.TAR_GZ:
        compressed = workdir / f"{base}.tar.gz"
        _compress(tar, compressed, gzip.open)
    else:
        compressed = workdir / f"{base}.tar.bz2"
        _compress(tar, compressed, bz2.open)

    if compressed != target:
        try:
            compressed.replace(target)
        except OSError as e:
            logger.warning("could not rename %s to %s: %s", compressed.name, target.name, e)
            return ArchiveResult(path=compressed, suffix=suffix, created=True, format=fmt)
    return ArchiveResult(path=target, suffix=suffix, created=True, format=fmt)
