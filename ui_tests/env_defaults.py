"""Read the suite's developer defaults from ``.env.defaults``.

The file lives at the repository root and holds the values a developer
machine runs the suite with. Real environment variables always win over it;
see ``ui_tests.config``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable

ENV_DEFAULTS_PATH = Path(__file__).resolve().parents[1] / ".env.defaults"


def parse_env_defaults(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``KEY=value`` lines; blanks, comments and malformed lines are skipped.

    A value wrapped in matching single or double quotes is unquoted. Later
    keys override earlier ones.
    """
    defaults: Dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        defaults[key] = value
    return defaults


@lru_cache(maxsize=1)
def _load_env_defaults() -> Dict[str, str]:
    if not ENV_DEFAULTS_PATH.exists():
        return {}
    return parse_env_defaults(ENV_DEFAULTS_PATH.read_text(encoding="utf-8").splitlines())


def get_env_default(key: str) -> str | None:
    return _load_env_defaults().get(key)
