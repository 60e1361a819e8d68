"""Filesystem helpers for converter output and YAML files.

Provides:
    - Atomic writes: tmp file -> fsync -> rename (no partial ``.pdc`` files)
    - YAML load/dump (PyYAML ``safe_*``)
    - Output path resolution for the CLI

All paths use pathlib.Path.

Usage:
    from svg2pdc.utils import fs
    fs.atomic_write_bytes(out_path, image.to_bytes())
    cfg = fs.load_yaml("svg2pdc/configs/converter.yaml")
"""

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create a directory (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp",
) -> None:
    """Write bytes to a file atomically (tmp -> fsync -> rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path; parent directories are created.
    data : bytes
        File contents.
    tmp_suffix : str
        Suffix of the temporary sibling file, default ".tmp".

    Raises
    ------
    OSError
        If writing or renaming fails.  The temporary file is removed and an
        existing target is left untouched.
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_name(path.name + tmp_suffix)

    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def write_bytes(path: Union[str, Path], data: bytes, *, atomic: bool = True) -> None:
    """Write *data* to *path*, atomically unless *atomic* is False."""
    if atomic:
        atomic_write_bytes(path, data)
        return
    path = Path(path)
    ensure_dir(path.parent)
    path.write_bytes(data)


def load_yaml(path: Union[str, Path]) -> Any:
    """Load a YAML file with ``yaml.safe_load``.

    Returns
    -------
    Any
        Parsed content; ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist.
    yaml.YAMLError
        If parsing fails (message names the file).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save *obj* as YAML atomically (key order preserved)."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write_bytes(path, text.encode("utf-8"))


def resolve_output_path(
    input_path: Union[str, Path],
    output: Optional[Union[str, Path]],
    extension: str,
) -> Path:
    """Where a converted file goes.

    Parameters
    ----------
    input_path : Union[str, Path]
        Source document.
    output : Union[str, Path], optional
        Explicit destination.  ``None`` means next to the input; an
        existing directory receives ``<input stem><extension>``.
    extension : str
        Output extension including the dot (``".pdc"``).

    Returns
    -------
    Path
        Destination file path.
    """
    input_path = Path(input_path)
    if output is None:
        return input_path.with_suffix(extension)
    output = Path(output)
    if output.is_dir():
        return output / (input_path.stem + extension)
    return output

