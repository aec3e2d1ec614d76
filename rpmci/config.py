"""
config.py

Responsibility: build the immutable run configuration exactly once.

Inputs, in increasing precedence:
- built-in defaults
- an optional YAML config file (`--config`)
- CI environment variables injected by Jenkins
- command-line flags

Nothing downstream reads `os.environ` or argparse state directly; stages only
see a `BuildConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from rpmci.errors import ConfigError

DEFAULT_MOCK_CONFIG = "epel-6-x86_64"


@dataclass(frozen=True)
class ToolPaths:
    """Executables for every external collaborator."""

    rpm: str = "rpm"
    rpmbuild: str = "rpmbuild"
    rpmlint: str = "/usr/bin/rpmlint"
    spectool: str = "spectool"
    mock: str = "/usr/bin/mock"
    createrepo: str = "createrepo"
    git: str = "git"


@dataclass(frozen=True)
class CiEnvironment:
    """Build metadata provided by the CI server."""

    build_number: str = ""
    build_tag: str = ""
    build_url: str = ""
    job_name: str = ""
    job_url: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "CiEnvironment":
        return cls(
            build_number=environ.get("BUILD_NUMBER", ""),
            build_tag=environ.get("BUILD_TAG", ""),
            build_url=environ.get("BUILD_URL", ""),
            job_name=environ.get("JOB_NAME", ""),
            job_url=environ.get("JOB_URL", ""),
        )

    def template_tokens(self) -> dict[str, str]:
        return {
            "BUILD_NUMBER": self.build_number,
            "BUILD_TAG": self.build_tag,
            "BUILD_URL": self.build_url,
            "JOB_NAME": self.job_name,
        }


@dataclass(frozen=True)
class FileSettings:
    default_mock: str = DEFAULT_MOCK_CONFIG
    tools: ToolPaths = field(default_factory=ToolPaths)


@dataclass(frozen=True)
class BuildConfig:
    spec_path: Path
    mock_config: str = DEFAULT_MOCK_CONFIG
    snapshot: bool = False
    debug: bool = False
    workdir: Path = field(default_factory=Path.cwd)
    ci: CiEnvironment = field(default_factory=CiEnvironment)
    tools: ToolPaths = field(default_factory=ToolPaths)

    @property
    def keep_mock_env(self) -> bool:
        return self.debug

    @property
    def mock_name(self) -> str:
        return mock_config_name(self.mock_config)

    @property
    def result_dir(self) -> Path:
        return Path("repo") / self.mock_name


def mock_config_name(mock_config: str) -> str:
    """
    Name a mock config by a single path component.

    `mock -r` also takes a path to a `.cfg` file; such values are named by the
    file stem, so `/etc/mock/epel-5-x86_64.cfg` -> `epel-5-x86_64`.
    """
    value = mock_config.strip()
    name = Path(value).stem if ("/" in value or value.endswith(".cfg")) else value
    if not name or name in (".", "..") or "/" in name:
        raise ConfigError(f"Unusable mock config: {mock_config!r}")
    return name


def load_config_file(path: str | Path) -> FileSettings:
    """
    Parse the optional YAML config file.

    Recognized keys:
    - default_mock: str
    - tools: mapping of tool name -> executable path
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        raise ConfigError(f"Config file does not exist: {cfg_path}")

    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {cfg_path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")

    default_mock = str(data.get("default_mock") or DEFAULT_MOCK_CONFIG).strip()

    tools_raw: Any = data.get("tools") or {}
    if not isinstance(tools_raw, dict):
        raise ConfigError("`tools` must be an object/mapping when provided.")
    known = {f.name for f in fields(ToolPaths)}
    unknown = sorted(str(k) for k in tools_raw if k not in known)
    if unknown:
        raise ConfigError(f"Unknown tool(s) in config: {', '.join(unknown)}")
    tools = replace(ToolPaths(), **{str(k): str(v) for k, v in tools_raw.items()})

    return FileSettings(default_mock=default_mock, tools=tools)


def build_config(
    *,
    spec_path: str | Path,
    mock_config: str | None,
    snapshot: bool,
    debug: bool,
    environ: Mapping[str, str],
    config_file: str | Path | None = None,
    workdir: str | Path | None = None,
) -> BuildConfig:
    settings = load_config_file(config_file) if config_file else FileSettings()
    mock = mock_config or settings.default_mock
    mock_config_name(mock)
    return BuildConfig(
        spec_path=Path(spec_path),
        mock_config=mock,
        snapshot=snapshot,
        debug=debug,
        workdir=Path(workdir) if workdir else Path.cwd(),
        ci=CiEnvironment.from_environ(environ),
        tools=settings.tools,
    )
