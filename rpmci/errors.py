"""
errors.py

Responsibility: the exception root shared by every stage.

Each module raises its own subclass; `cli.main` catches `BuildError` and turns
it into exit status 1.
"""

from __future__ import annotations


class BuildError(RuntimeError):
    pass


class ConfigError(BuildError):
    pass
