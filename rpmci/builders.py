"""
builders.py

Responsibility: what each known mock config implies for the build.

Old EL releases cannot read packages built with current rpm defaults, so the
recognized legacy targets carry compatibility defines, a dist suffix and a
createrepo checksum. A new target is a new `MockTarget` member plus a profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class BuilderProfile:
    dist_suffix: str = ""
    rpm_defines: tuple[tuple[str, str], ...] = ()
    repo_checksum: str | None = None

    @property
    def dist_define(self) -> str:
        return self.dist_suffix or "%{nil}"

    def mock_define_args(self) -> list[str]:
        args: list[str] = []
        for macro, value in self.rpm_defines:
            args += ["-D", f"{macro} {value}"]
        return args


DEFAULT_PROFILE = BuilderProfile()


class MockTarget(Enum):
    EL5 = "epel-5-x86_64"
    EL6 = "epel-6-x86_64"

    @property
    def profile(self) -> BuilderProfile:
        return _PROFILES[self]


_PROFILES = {
    MockTarget.EL5: BuilderProfile(
        dist_suffix=".el5",
        rpm_defines=(
            ("_source_filedigest_algorithm", "1"),
            ("_binary_filedigest_algorithm", "1"),
            ("_binary_payload", "w9.gzdio"),
        ),
        repo_checksum="sha",
    ),
    MockTarget.EL6: BuilderProfile(dist_suffix=".el6"),
}


def profile_for(mock_config: str) -> BuilderProfile:
    try:
        return MockTarget(mock_config).profile
    except ValueError:
        return DEFAULT_PROFILE
