"""
cli.py

Responsibility: CLI entrypoint for rpmci.

High-level flow (one .spec file per invocation):
1) Resolve package name / version / release -> `PackageIdentity`
2) Substitute CI build metadata into the .spec text
3) Make sure the Source0 archive exists (synthesize from git if needed)
4) (Optional) Rewrite version and archive for a snapshot build
5) Write the .spec file back, lint it, build the SRPM, rebuild it in mock
6) Index the result directory and write its `.repo` file

This module should orchestrate behavior but keep concerns isolated:
- Identity: `identity.py`
- Placeholders: `renderer.py` via `specfile.py`
- Archives: `archive.py`, `snapshot.py`
- rpmbuild / mock: `build.py`, `builders.py`
- createrepo: `publish.py`
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from rpmci import archive, build, publish, snapshot
from rpmci.builders import profile_for
from rpmci.commands import Runner, Toolchain, run_command
from rpmci.config import BuildConfig, build_config
from rpmci.errors import BuildError
from rpmci.identity import resolve_identity
from rpmci.logs import banner, configure_logging
from rpmci.specfile import SpecFile, source0_filename

logger = logging.getLogger(__name__)


def build_cmd(config: BuildConfig, *, runner: Runner = run_command) -> int:
    workdir = config.workdir
    tools = Toolchain(paths=config.tools, cwd=workdir, runner=runner)
    profile = profile_for(config.mock_name)

    spec = SpecFile.load(config.spec_path)
    spec, ident = resolve_identity(spec, tools)
    banner(
        logger,
        f"Package Name:    {ident.name}",
        f"Package Version: {ident.version}",
        f"Package Release: {ident.release}",
    )

    spec = spec.render(config.ci.template_tokens())

    source = archive.build_source_archive(
        expected=source0_filename(spec, tools),
        name=ident.name,
        version=ident.version,
        tools=tools,
    )

    if not source.exists:
        logger.warning("source archive %s is missing; the source RPM build will fail", source.path.name)

    versions = [ident.version]
    if config.snapshot:
        snap = snapshot.apply_snapshot(
            spec,
            name=ident.name,
            version=ident.version,
            archive_suffix=source.suffix,
            tools=tools,
        )
        spec = snap.spec
        logger.info("snapshot source archive: %s", snap.archive.name)
        versions.append(f"{ident.version}.{snap.suffix}")

    spec.save()
    build.lint(spec.path, tools)

    build.build_srpm(spec.path, profile, tools)
    srpm = build.find_srpm(workdir, ident.name, versions)

    result_dir = build.prepare_result_dir(workdir / config.result_dir, root=workdir)
    build.mock_build(
        srpm,
        mock_config=config.mock_config,
        result_dir=result_dir,
        profile=profile,
        keep_env=config.keep_mock_env,
        tools=tools,
    )
    build.list_rpms(workdir)

    publish.index_repository(result_dir, profile, tools)
    publish.write_repo_config(
        result_dir=result_dir,
        relative_result_dir=config.result_dir.as_posix(),
        ci=config.ci,
        mock_config=config.mock_name,
    )

    banner(logger, "DONE")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rpmci-build", description="Build RPMs for the given .spec file")
    p.add_argument("spec_path", help="Path to the .spec file")
    p.add_argument("-m", "--mock", dest="mock_config", default=None, help="The mock environment to use for the build")
    p.add_argument("-s", "--snap", dest="snapshot", action="store_true", help="Create a snapshot RPM")
    p.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug features, such as retaining the mock environment after a build failure",
    )
    p.add_argument("-c", "--config", default=None, help="Optional YAML file with tool paths and default mock config")
    return p


def main(argv: list[str] | None = None, *, runner: Runner = run_command) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    spec_path = Path(args.spec_path)
    if not spec_path.is_file() or not os.access(spec_path, os.R_OK):
        parser.error(f"could not open spec file: {spec_path}")

    configure_logging(debug=bool(args.debug))
    try:
        config = build_config(
            spec_path=spec_path,
            mock_config=args.mock_config,
            snapshot=bool(args.snapshot),
            debug=bool(args.debug),
            environ=os.environ,
            config_file=args.config,
        )
        return build_cmd(config, runner=runner)
    except BuildError as e:
        logger.error("ERROR: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
