"""
snapshot.py

Responsibility: turn a release build into a snapshot build.

Example version after snapshotting: `5.4.1.snap.20130116.161144.git.041ef6c`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rpmci import vcs
from rpmci.commands import Toolchain
from rpmci.logs import banner
from rpmci.specfile import SpecFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    suffix: str
    spec: SpecFile
    archive: Path


def snapshot_suffix(revision: str, *, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d.%H%M%S")
    return f"snap.{stamp}.git.{revision}"


def apply_snapshot(
    spec: SpecFile,
    *,
    name: str,
    version: str,
    archive_suffix: str,
    tools: Toolchain,
    now: datetime | None = None,
) -> Snapshot:
    suffix = snapshot_suffix(vcs.short_head(tools), now=now)
    spec = spec.append_version_suffix(suffix)

    workdir = Path(tools.cwd)
    src = workdir / f"{name}-{version}{archive_suffix}"
    dst = workdir / f"{name}-{version}.{suffix}{archive_suffix}"
    if src.is_file():
        src.rename(dst)
    else:
        logger.warning("no source archive %s to rename for the snapshot", src.name)

    banner(logger, f"building snapshot release: {name}-{version}.{suffix}")
    return Snapshot(suffix=suffix, spec=spec, archive=dst)
