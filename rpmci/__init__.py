"""
rpmci package

This package builds RPMs for one .spec file from a CI job and publishes them
as a yum repository.

Key responsibilities are split across modules:
- `config.py`: immutable run configuration (flags, CI environment, YAML file)
- `commands.py`: typed wrapper around every external tool invocation
- `specfile.py`: in-memory .spec model and rpm/spectool queries
- `identity.py`: name / version / release resolution from the .spec file and git tags
- `renderer.py`: `@@TOKEN@@` placeholder substitution
- `archive.py`, `snapshot.py`: Source0 synthesis and snapshot versioning
- `build.py`, `builders.py`: rpmlint, rpmbuild and mock
- `publish.py`: createrepo and the `.repo` file
- `cli.py`: CLI entrypoint and orchestration
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
