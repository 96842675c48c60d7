"""App path helpers (cross-platform).

Where rendered images go when no explicit output path is given.

Environment overrides:
- FW_OUTPUT_DIR: explicit output dir for rendered scenes
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_pictures_dir

APP_NAME = "Fiberwalk"


def _env_path(name: str) -> Path | None:
    v = os.environ.get(name)
    if not v:
        return None
    return Path(os.path.expanduser(v)).resolve()


def get_output_dir() -> Path:
    """Output dir for rendered scenes (created on demand)."""
    out_dir = _env_path("FW_OUTPUT_DIR")
    if out_dir is None:
        out_dir = Path(user_pictures_dir()).resolve() / APP_NAME
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def default_output_path(preset: str, seed: int) -> Path:
    return get_output_dir() / f"{preset}_{seed}.png"
