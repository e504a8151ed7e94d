# ABOUTME: File helpers shared by the SSOT and every live file adapter.
# ABOUTME: All writes go through a sibling temp file + os.replace so readers never see a truncated file.
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ccswitch.errors import FileIOError, JsonParseError


def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file, wrapping OS and decoding errors with path context."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileIOError(path, e) from e


def read_json_file(path: Path) -> Any:
    """Read JSON file with error handling.

    ABOUTME: Raises JsonParseError for invalid JSON
    ABOUTME: Missing files surface as FileIOError; callers check existence first

    Args:
        path: JSON file to read

    Returns:
        Parsed JSON value
    """
    text = read_text_file(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise JsonParseError(path, e) from e


def write_text_file(path: Path, content: str) -> None:
    """Atomically replace `path` with `content`.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Temp file lives in the target directory to avoid cross-device renames

    Raises:
        FileIOError: If any filesystem step fails; the target is left untouched
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as fh:
            tmp_path = Path(fh.name)
            fh.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise FileIOError(path, e) from e


def dump_json(data: Any, *, sort_keys: bool = False) -> str:
    """Serialize with 2-space indentation and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=sort_keys) + "\n"


def write_json_file(path: Path, data: Any, *, sort_keys: bool = False) -> None:
    """Atomically write `data` as pretty-printed JSON."""
    write_text_file(path, dump_json(data, sort_keys=sort_keys))


def delete_file(path: Path) -> None:
    """Remove a file if present."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise FileIOError(path, e) from e
