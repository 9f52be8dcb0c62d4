"""Helpers for comparing replies with JSON documents and golden files."""

from __future__ import annotations

import base64
import dataclasses
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any

_UPDATE_VARIABLE = "BYBIT_TEST_UPDATED"


def _plain(value: Any) -> Any:
    """Turn objects json cannot handle into JSON-ready values."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"cannot represent {type(value).__name__} as JSON")


def convert_to_json(src: Any) -> bytes:
    """Render ``src`` as indented JSON."""
    return json.dumps(src, indent=2, ensure_ascii=False, default=_plain).encode("utf-8")


def _same(want: Any, got: Any) -> bool:
    """Compare decoded JSON values, telling booleans and numbers apart."""
    if isinstance(want, bool) or isinstance(got, bool):
        return isinstance(want, bool) and isinstance(got, bool) and want == got
    if isinstance(want, (int, float)) and isinstance(got, (int, float)):
        return float(want) == float(got)
    if isinstance(want, dict) and isinstance(got, dict):
        return want.keys() == got.keys() and all(_same(want[k], got[k]) for k in want)
    if isinstance(want, list) and isinstance(got, list):
        return len(want) == len(got) and all(_same(a, b) for a, b in zip(want, got))
    return type(want) is type(got) and want == got


def _json_text_equal(want: bytes | str, got: bytes | str) -> bool:
    return _same(json.loads(want), json.loads(got))


def json_equal(want: Any, got: Any) -> bool:
    """Tell whether two values render to the same JSON document."""
    return _json_text_equal(convert_to_json(want), convert_to_json(got))


def compare(golden_filename: str | os.PathLike[str], got: bytes | str) -> bool:
    """Check ``got`` against a golden file.

    Returns False when the golden file does not exist, True when it matched,
    and raises AssertionError when it differs.
    """
    path = Path(golden_filename)
    try:
        want = path.read_bytes()
    except FileNotFoundError:
        return False
    if not _json_text_equal(want, got):
        shown = got.decode("utf-8", "replace") if isinstance(got, bytes) else got
        raise AssertionError(f"{path} does not match:\n{shown}")
    return True


def save_to_file(name: str | os.PathLike[str], data: bytes) -> None:
    """Write ``data`` to ``name``, creating it with mode 0644."""
    fd = os.open(os.fspath(name), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def update_file(filename: str | os.PathLike[str], data: bytes) -> bool:
    """Rewrite the golden file when BYBIT_TEST_UPDATED is "true"."""
    if os.environ.get(_UPDATE_VARIABLE) != "true":
        return False
    save_to_file(filename, data)
    return True