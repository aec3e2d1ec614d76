"""
publish.py

Responsibility: turn the mock result directory into a yum repository and write
the `.repo` file CI consumers install to use it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, StrictUndefined

from rpmci.builders import BuilderProfile
from rpmci.commands import Toolchain
from rpmci.config import CiEnvironment
from rpmci.logs import banner

logger = logging.getLogger(__name__)

REPO_TEMPLATE = """\
[{{ job_name }}-{{ mock_config }}]
name=CI build of {{ job_name }} on {{ mock_config }} builder
enabled=1
gpgcheck=0
baseurl={{ job_url }}/ws/{{ result_dir }}/
"""

_ENV = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)


def index_repository(result_dir: Path, profile: BuilderProfile, tools: Toolchain) -> None:
    banner(logger, f"generating repofiles: {result_dir}")
    args = ["-s", profile.repo_checksum] if profile.repo_checksum else []
    tools.run("createrepo", *args, str(result_dir))


def render_repo_config(*, ci: CiEnvironment, mock_config: str, result_dir: str) -> str:
    return _ENV.from_string(REPO_TEMPLATE).render(
        job_name=ci.job_name,
        mock_config=mock_config,
        job_url=ci.job_url.rstrip("/"),
        result_dir=result_dir.strip("/"),
    )


def repo_config_path(result_dir: Path, ci: CiEnvironment, mock_config: str) -> Path:
    return Path(result_dir) / f"{ci.job_name}-{mock_config}.repo"


def write_repo_config(
    *,
    result_dir: Path,
    relative_result_dir: str,
    ci: CiEnvironment,
    mock_config: str,
) -> Path:
    text = render_repo_config(ci=ci, mock_config=mock_config, result_dir=relative_result_dir)
    path = repo_config_path(result_dir, ci, mock_config)
    path.write_text(text, encoding="utf-8")

    banner(logger, "yum repository configuration")
    for line in text.splitlines():
        logger.info("%s", line)
    return path
