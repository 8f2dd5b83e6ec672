"""File I/O utilities — atomic writes, YAML and JSON handling."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

_yaml = YAML()
_yaml.default_flow_style = False


def write_atomic(path: Path | str, data: Any, *, as_yaml: bool = False) -> None:
    """Write to a temp file next to ``path`` and rename it into place."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        suffix=path.suffix,
        delete=False,
        encoding="utf-8",
    ) as tmp:
        if as_yaml:
            _yaml.dump(data, tmp)
        elif isinstance(data, str):
            tmp.write(data)
        else:
            json.dump(data, tmp, indent=2, default=str)
        tmp_path = Path(tmp.name)

    tmp_path.replace(path)


def read_yaml(path: Path | str) -> dict:
    with open(path, encoding="utf-8") as f:
        return dict(_yaml.load(f) or {})


def write_yaml(path: Path | str, data: dict) -> None:
    write_atomic(path, data, as_yaml=True)


def read_json(path: Path | str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path | str, data: Any) -> None:
    write_atomic(path, data)
