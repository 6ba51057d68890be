# utils/io.py
from __future__ import annotations

import glob
import json
from pathlib import Path
from typing import IO, Any, Callable, Union

import yaml

# -------- Path helpers --------
PathLike = Union[str, Path]


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path, expanding '~'."""
    return p.expanduser() if isinstance(p, Path) else Path(p).expanduser()


def ensure_parent(path: PathLike) -> Path:
    """Ensure parent directory exists for a file path."""
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def list_files(pattern: str) -> list[Path]:
    """List files matching a glob pattern (`**` allowed)."""
    return sorted(Path(p) for p in glob.glob(pattern, recursive=True))


# -------- JSON / YAML --------
def read_json(path: PathLike) -> Any:
    """Load JSON file with UTF-8."""
    with to_path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def _atomic_write(path: PathLike, dump: Callable[[IO[str]], None]) -> Path:
    """Write through a temp file then replace; the temp file never outlives a failed write."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            dump(f)
        tmp.replace(p)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return p


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically, pretty-formatted."""
    return _atomic_write(path, lambda f: json.dump(data, f, ensure_ascii=False, indent=indent))


def read_yaml(path: PathLike) -> Any:
    """Load a YAML document (safe loader)."""
    with to_path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_yaml(path: PathLike, data: Any) -> Path:
    """Write YAML atomically, keeping key order."""
    return _atomic_write(path, lambda f: yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True))


# -------- Generic loader --------
def load_any(path: PathLike) -> Any:
    """
    Load data by extension:
      - .json -> JSON
      - .yaml/.yml -> YAML
    """
    p = to_path(path)
    suf = p.suffix.lower()
    if suf == ".json":
        return read_json(p)
    if suf in (".yaml", ".yml"):
        return read_yaml(p)
    raise ValueError(f"Unsupported extension: {suf} for {p}")


def dump_any(path: PathLike, data: Any) -> Path:
    """Write data as JSON or YAML depending on the extension."""
    p = to_path(path)
    if p.suffix.lower() in (".yaml", ".yml"):
        return write_yaml(p, data)
    return write_json(p, data)
