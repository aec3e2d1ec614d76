"""
renderer.py

Responsibility: substitute `@@TOKEN@@` placeholders in description-file text.

Rules:
- Only `@@name@@` where `name` is one of the supplied tokens is replaced.
- Everything else, including other `@@...@@` sequences (changelog text, sed
  expressions in %install), is copied through unchanged.
- Values are inserted verbatim (no escaping, no validation).

This module intentionally does NOT know about rpm, git, or the CI server.
"""

from __future__ import annotations

import re
from typing import Any, Mapping


def render_tokens(text: str, tokens: Mapping[str, Any]) -> str:
    if "@@" not in text or not tokens:
        return text
    values = {name: str(value) for name, value in tokens.items()}
    # longest first so BUILD_TAG never shadows a longer name sharing its prefix
    names = sorted(values, key=len, reverse=True)
    pattern = re.compile("@@(" + "|".join(re.escape(n) for n in names) + ")@@")
    return pattern.sub(lambda m: values[m.group(1)], text)
