"""
build.py

Responsibility: lint the description file, build the source RPM, and rebuild
it into binary RPMs inside mock.

Layout used in the working directory:
- sources are read from the working directory itself (`_sourcedir`)
- the source RPM is written to `SRPMS/`
- binary RPMs land in the result directory `repo/<mock config>/`
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from rpmci.builders import BuilderProfile
from rpmci.commands import Toolchain
from rpmci.errors import BuildError
from rpmci.logs import banner

logger = logging.getLogger(__name__)


class SourceRpmMissingError(BuildError):
    pass


def lint(spec_path: Path, tools: Toolchain) -> bool:
    """Run rpmlint; problems are reported but never stop the build."""
    result = tools.run("rpmlint", str(spec_path), check=False)
    for line in result.stdout.splitlines():
        logger.info("rpmlint: %s", line)
    if not result.ok:
        logger.warning("rpmlint reported problems (exit %d); continuing", result.returncode)
    return result.ok


def build_srpm(spec_path: Path, profile: BuilderProfile, tools: Toolchain) -> None:
    banner(logger, "building source RPM")
    topdir = Path(tools.cwd).resolve()
    for old in (topdir / "SRPMS").glob("*.src.rpm"):
        old.unlink()
    result = tools.run(
        "rpmbuild",
        "-bs",
        "--define", f"_topdir {topdir}",
        "--define", "_sourcedir %{_topdir}",
        "--define", f"dist {profile.dist_define}",
        "--define", "_source_filedigest_algorithm md5",
        "--define", "_binary_filedigest_algorithm md5",
        str(spec_path),
    )
    for line in result.stdout.splitlines():
        if line.startswith("Wrote:"):
            logger.info("%s", line)


def find_srpm(workdir: Path, name: str, versions: list[str]) -> Path:
    """Locate the source RPM for any of `versions` (plain, then snapshot)."""
    srpms = Path(workdir) / "SRPMS"
    for version in versions:
        found = sorted(srpms.glob(f"{name}-{version}-*.src.rpm"))
        if found:
            return found[-1]
    raise SourceRpmMissingError("no .src.rpm found")


def prepare_result_dir(result_dir: Path, *, root: Path) -> Path:
    """Delete and recreate `result_dir`, which must lie strictly inside `root`."""
    resolved = Path(result_dir).resolve()
    base = Path(root).resolve()
    if resolved == base or not resolved.is_relative_to(base):
        raise BuildError(f"result directory {result_dir} is outside the working directory {root}")
    if result_dir.exists():
        shutil.rmtree(result_dir)
    result_dir.mkdir(parents=True)
    return result_dir


def mock_build(
    srpm: Path,
    *,
    mock_config: str,
    result_dir: Path,
    profile: BuilderProfile,
    keep_env: bool,
    tools: Toolchain,
) -> None:
    banner(logger, "building in mock")
    args = [*profile.mock_define_args(), "-r", mock_config]
    if keep_env:
        args.append("--no-cleanup-after")
    args += ["--resultdir", str(result_dir), "-D", f"dist {profile.dist_define}", str(srpm)]
    tools.run("mock", *args)


def list_rpms(root: Path) -> list[Path]:
    rpms = sorted(Path(root).rglob("*.rpm"))
    banner(logger, "the following RPMs were built")
    for rpm in rpms:
        logger.info("%s", rpm)
    return rpms
