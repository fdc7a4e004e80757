"""
Puzzle Importer / Validator

Parses externally supplied puzzle files into the internal Puzzle schema.
Validation is all-or-nothing: the first bad element rejects the whole file
with a message naming its 1-based position.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import requests

from puzzles.puzzle_types import Puzzle

logger = logging.getLogger(__name__)

BOM = "\ufeff"


class PuzzleImportError(ValueError):
    """Base class for rejected puzzle files."""


class ParseError(PuzzleImportError):
    """The text is empty or not valid JSON."""


class SchemaError(PuzzleImportError):
    """The JSON does not describe a list of puzzles."""


def _normalize_moves(value: Any) -> Optional[List[str]]:
    """Wrap a single SAN string, trim entries and drop blanks.

    Returns None when the value is neither a string nor a list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    return [str(m).strip() for m in value if str(m).strip()]


def _coerce_id(value: Any, position: int) -> int:
    if isinstance(value, bool):
        raise SchemaError(f"Item #{position}: id must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise SchemaError(f"Item #{position}: id must be an integer.")


def _normalize_item(item: Any, position: int, fallback_id: int) -> Puzzle:
    if not isinstance(item, dict):
        raise SchemaError(f"Item #{position} is not an object.")

    fen = item.get("fen")
    if not isinstance(fen, str) or not fen.strip():
        raise SchemaError(f"Item #{position}: fen is missing.")

    line = None
    if item.get("line") is not None:
        line = _normalize_moves(item["line"])
        if line is None:
            raise SchemaError(f"Item #{position}: line must be a list or a string.")

    if item.get("solution") is not None or not line:
        raw = item.get("solution")
        solution = _normalize_moves(raw)
        if solution is None or (isinstance(raw, list) and not raw):
            raise SchemaError(f"Item #{position}: solution must be a list or a string.")
        if not solution:
            raise SchemaError(f"Item #{position}: solution is empty after cleanup.")
    else:
        # Line-only puzzles answer with the first scripted move
        solution = [line[0]]

    puzzle_id = _coerce_id(item["id"], position) if item.get("id") is not None else fallback_id

    return Puzzle(id=puzzle_id, fen=fen.strip(), solution=solution, line=line or None)


def normalize_puzzles(data: Any) -> List[Puzzle]:
    """Validate decoded JSON and return the normalized puzzle list."""
    if not isinstance(data, list):
        raise SchemaError("The file must contain a JSON array of puzzles [{id, fen, solution}].")

    out: List[Puzzle] = []
    for i, item in enumerate(data):
        out.append(_normalize_item(item, i + 1, len(out) + 1))
    return out


def parse_puzzle_file(text: str | bytes) -> List[Puzzle]:
    """
    Parse the raw contents of a puzzle file.

    Args:
        text: File contents (bytes are decoded as UTF-8)

    Returns:
        List of normalized puzzles

    Raises:
        ParseError: empty text or invalid JSON
        SchemaError: valid JSON with the wrong shape
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"File is not UTF-8 text ({e})") from e

    if not text:
        raise ParseError("Empty file")
    if text.startswith(BOM):
        text = text[1:]
    if not text.strip():
        raise ParseError("Empty file")

    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise ParseError(f"JSON syntax error ({e})") from e

    return normalize_puzzles(data)


def load_default_puzzles(source: str, timeout: float = 10) -> List[Puzzle]:
    """
    Load the startup fallback puzzle set.

    `source` is a local path or an http(s) URL.
    """
    if source.startswith(("http://", "https://")):
        try:
            resp = requests.get(source, timeout=timeout)
        except requests.RequestException as e:
            raise PuzzleImportError(f"Could not fetch {source}: {e}") from e
        if resp.status_code >= 400:
            raise PuzzleImportError(f"Could not fetch {source}: HTTP {resp.status_code}")
        text = resp.text
    else:
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PuzzleImportError(f"Could not read {path}: {e}") from e

    puzzles = parse_puzzle_file(text)
    logger.info("Loaded %d default puzzles from %s", len(puzzles), source)
    return puzzles
