"""Path helpers for the ranking file.

Environment-first: the CLI argument wins, then TTT_STORE, then nothing
(the caller reports usage).
"""

from __future__ import annotations

import os
from pathlib import Path

STORE_ENV = "TTT_STORE"


def resolve_store_path(arg: str | os.PathLike[str] | None) -> Path | None:
    if arg:
        return Path(arg).expanduser()
    env = os.getenv(STORE_ENV)
    if env:
        return Path(env).expanduser()
    return None


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
