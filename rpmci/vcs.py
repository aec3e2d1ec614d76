"""
vcs.py

Responsibility: every git query and command the pipeline needs.

All calls run in the working directory through the configured `Toolchain`.
"""

from __future__ import annotations

from pathlib import Path

from rpmci.commands import Toolchain


def latest_tag(tools: Toolchain) -> str:
    """Most recent reachable tag, or "" when there is none."""
    result = tools.run("git", "describe", "--abbrev=0", check=False)
    return result.first_line() if result.ok else ""


def list_tags(tools: Toolchain) -> list[str]:
    result = tools.run("git", "tag", "--list")
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def tag_exists(tools: Toolchain, tag: str) -> bool:
    return tag in list_tags(tools)


def short_head(tools: Toolchain) -> str:
    return tools.run("git", "log", "-1", "--pretty=format:%h").stdout.strip()


def archive_head(tools: Toolchain, *, fmt: str, prefix: str, output: Path) -> None:
    """Write HEAD as a `tar` or `zip` archive whose entries all live under `prefix`."""
    tools.run("git", "archive", f"--format={fmt}", f"--prefix={prefix}", "-o", str(output), "HEAD")
