from __future__ import annotations

from pathlib import Path

import pytest

from rpmci import build
from rpmci.commands import CommandError
from rpmci.builders import DEFAULT_PROFILE, MockTarget, profile_for
from rpmci.errors import BuildError


def test_el5_profile_selects_legacy_compat_flags() -> None:
    profile = profile_for("epel-5-x86_64")
    assert profile is MockTarget.EL5.profile
    assert profile.dist_suffix == ".el5"
    assert profile.repo_checksum == "sha"
    assert profile.mock_define_args() == [
        "-D", "_source_filedigest_algorithm 1",
        "-D", "_binary_filedigest_algorithm 1",
        "-D", "_binary_payload w9.gzdio",
    ]


def test_el6_profile_only_sets_dist() -> None:
    profile = profile_for("epel-6-x86_64")
    assert profile.dist_suffix == ".el6"
    assert profile.mock_define_args() == []
    assert profile.repo_checksum is None


@pytest.mark.parametrize("mock_config", ["fedora-39-x86_64", "epel-7-x86_64", ""])
def test_unknown_builder_has_no_overrides(mock_config: str) -> None:
    profile = profile_for(mock_config)
    assert profile == DEFAULT_PROFILE
    assert profile.dist_suffix == ""
    assert profile.dist_define == "%{nil}"
    assert profile.mock_define_args() == []


def test_lint_failure_is_not_fatal(tmp_path: Path, tools, runner) -> None:
    runner.on("rpmlint", returncode=1, stdout="pkg.spec: W: no-changelogname-tag\n")
    assert build.lint(tmp_path / "pkg.spec", tools) is False


def test_build_srpm_clears_old_srpms_and_passes_defines(tmp_path: Path, tools, runner) -> None:
    srpms = tmp_path / "SRPMS"
    srpms.mkdir()
    (srpms / "old-0.1-1.src.rpm").write_bytes(b"")

    build.build_srpm(tmp_path / "pkg.spec", MockTarget.EL6.profile, tools)

    assert list(srpms.iterdir()) == []
    (call,) = runner.called("rpmbuild")
    assert call[1] == "-bs"
    assert f"_topdir {tmp_path.resolve()}" in call
    assert "_sourcedir %{_topdir}" in call
    assert "dist .el6" in call
    assert "_source_filedigest_algorithm md5" in call
    assert call[-1] == str(tmp_path / "pkg.spec")


def test_find_srpm_plain_and_snapshot(tmp_path: Path) -> None:
    srpms = tmp_path / "SRPMS"
    srpms.mkdir()
    snap = srpms / "pkg-1.0.snap.20130116.161144.git.abc1234-1.el6.src.rpm"
    snap.write_bytes(b"")

    found = build.find_srpm(tmp_path, "pkg", ["1.0", "1.0.snap.20130116.161144.git.abc1234"])
    assert found == snap

    plain = srpms / "pkg-1.0-1.el6.src.rpm"
    plain.write_bytes(b"")
    assert build.find_srpm(tmp_path, "pkg", ["1.0"]) == plain


def test_find_srpm_missing(tmp_path: Path) -> None:
    with pytest.raises(build.SourceRpmMissingError):
        build.find_srpm(tmp_path, "pkg", ["1.0"])


def test_prepare_result_dir_recreates(tmp_path: Path) -> None:
    result_dir = tmp_path / "repo" / "epel-6-x86_64"
    result_dir.mkdir(parents=True)
    (result_dir / "stale.rpm").write_bytes(b"")

    assert build.prepare_result_dir(result_dir, root=tmp_path) == result_dir
    assert result_dir.is_dir() and list(result_dir.iterdir()) == []


def test_prepare_result_dir_refuses_outside_root(tmp_path: Path) -> None:
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    (outside / "keep.txt").write_text("keep")
    root = tmp_path / "work"
    root.mkdir()

    with pytest.raises(BuildError):
        build.prepare_result_dir(outside, root=root)
    with pytest.raises(BuildError):
        build.prepare_result_dir(root / "repo" / ".." / ".." / "elsewhere", root=root)
    with pytest.raises(BuildError):
        build.prepare_result_dir(root, root=root)

    assert (outside / "keep.txt").read_text() == "keep"
    assert root.is_dir()


def test_mock_build_el5_debug(tmp_path: Path, tools, runner) -> None:
    srpm = tmp_path / "SRPMS" / "pkg-1.0-1.el5.src.rpm"
    build.mock_build(
        srpm,
        mock_config="epel-5-x86_64",
        result_dir=tmp_path / "repo" / "epel-5-x86_64",
        profile=MockTarget.EL5.profile,
        keep_env=True,
        tools=tools,
    )
    (call,) = runner.called("mock")
    assert call[0] == "/usr/bin/mock"
    assert call[1:7] == [
        "-D", "_source_filedigest_algorithm 1",
        "-D", "_binary_filedigest_algorithm 1",
        "-D", "_binary_payload w9.gzdio",
    ]
    assert call[7:10] == ["-r", "epel-5-x86_64", "--no-cleanup-after"]
    assert call[-3:] == ["-D", "dist .el5", str(srpm)]


def test_mock_build_failure_propagates(tmp_path: Path, tools, runner) -> None:
    runner.on("mock", returncode=30)
    with pytest.raises(CommandError):
        build.mock_build(
            tmp_path / "x.src.rpm",
            mock_config="fedora-39-x86_64",
            result_dir=tmp_path / "repo",
            profile=DEFAULT_PROFILE,
            keep_env=False,
            tools=tools,
        )
    assert "--no-cleanup-after" not in runner.called("mock")[0]
