# transcoder/utils/paths.py
"""
Path helpers

Intent
- Make batch driver behavior independent of CWD.
- Standardize: configs/<name>.yaml => repo root; relative paths in a config resolve
  against that root.
"""
from __future__ import annotations

from pathlib import Path


def repo_root_from_config_path(config_path: str | Path) -> Path:
    """
    Given configs/source.yaml (or sink.yaml), return repo root.
    Works for absolute or relative paths.
    """
    p = Path(config_path).resolve()
    # .../repo/configs/source.yaml -> .../repo
    return p.parents[1]


def resolve_path(path_like: str | Path, *, base_dir: str | Path) -> Path:
    """
    Resolve a path relative to base_dir unless already absolute.
    """
    p = Path(path_like)
    if p.is_absolute():
        return p
    return (Path(base_dir) / p).resolve()


__all__ = ["repo_root_from_config_path", "resolve_path"]
