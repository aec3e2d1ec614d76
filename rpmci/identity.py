"""
identity.py

Responsibility: decide the name, version and release of the package.

Version and release either come straight from the description file or, when
the `@@version@@` / `@@release@@` placeholders are used, from git tags:
- version: trailing numeric-dotted part of the most recent tag
- release: one more than the highest `rpm-release-<version>-<n>` tag (1 if none)

A release that already has an `rpm-release-<version>-<release>` tag has been
built before; that is a hard stop.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from rpmci import vcs
from rpmci.commands import Toolchain
from rpmci.errors import BuildError
from rpmci.specfile import SpecFile, query_tag

logger = logging.getLogger(__name__)

RELEASE_TAG_PREFIX = "rpm-release-"


class IdentityError(BuildError):
    pass


class ReleaseCollisionError(IdentityError):
    pass


@dataclass(frozen=True)
class PackageIdentity:
    name: str
    version: str
    release: str

    @property
    def release_tag(self) -> str:
        return release_tag(self.version, self.release)


def release_tag(version: str, release: str | int) -> str:
    return f"{RELEASE_TAG_PREFIX}{version}-{release}"


def version_from_tag(tag: str) -> str:
    """`myproj-1.4.2` -> `1.4.2`; "" when the tag does not end in a version."""
    m = re.search(r"[0-9][0-9.]*$", tag.strip())
    return m.group(0).rstrip(".") if m else ""


def next_release(tags: list[str], version: str) -> int:
    pattern = re.compile(rf"^{re.escape(RELEASE_TAG_PREFIX + version)}-([0-9]+)$")
    releases = [int(m.group(1)) for m in map(pattern.match, tags) if m]
    return max(releases) + 1 if releases else 1


def leading_integer(value: str) -> str:
    m = re.match(r"[0-9]*", value.strip())
    return m.group(0) if m else ""


def resolve_name(spec: SpecFile, tools: Toolchain) -> str:
    name = query_tag(spec, "name", tools)
    if not name:
        raise IdentityError("could not determine package name")
    return name


def resolve_version(spec: SpecFile, tools: Toolchain) -> tuple[SpecFile, str]:
    if spec.has_placeholder("Version", "version"):
        tag = vcs.latest_tag(tools)
        tag_version = version_from_tag(tag)
        logger.info("version %r taken from tag %r", tag_version, tag)
        spec = spec.render({"version": tag_version})

    version = query_tag(spec, "version", tools)
    if not version:
        raise IdentityError("could not determine package version")
    return spec, version


def resolve_release(spec: SpecFile, version: str, tools: Toolchain) -> tuple[SpecFile, str]:
    if spec.has_placeholder("Release", "release"):
        computed = next_release(vcs.list_tags(tools), version)
        logger.info("release %d computed from %s%s-* tags", computed, RELEASE_TAG_PREFIX, version)
        spec = spec.render({"release": computed})

    release = leading_integer(query_tag(spec, "release", tools))
    if not release:
        raise IdentityError("could not determine package release")
    return spec, release


def check_release_unused(identity: PackageIdentity, tools: Toolchain) -> None:
    if vcs.tag_exists(tools, identity.release_tag):
        raise ReleaseCollisionError(f"{identity.release_tag} tag already exists")


def resolve_identity(spec: SpecFile, tools: Toolchain) -> tuple[SpecFile, PackageIdentity]:
    """Run name -> version -> release -> collision check, in that order."""
    name = resolve_name(spec, tools)
    spec, version = resolve_version(spec, tools)
    spec, release = resolve_release(spec, version, tools)
    identity = PackageIdentity(name=name, version=version, release=release)
    check_release_unused(identity, tools)
    return spec, identity
