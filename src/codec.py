"""Text codec for the tasks file (record blocks and the document around them).

On-disk layout, reproduced byte for byte by encode_document:

    [
      {
        "id": 1,
        "description": "Buy milk",
        "status": "todo",
        "priority": "high",
        "createdAt": "2024-01-01 10:00:00",
        "updatedAt": "2024-01-01 10:00:00"
      },
      {
        ...
      }
    ]

Decoding is lenient: it also reads files written by json.dump (any indent,
\\uXXXX escapes) and drops individual records it cannot make sense of
instead of failing the whole document.
"""
from __future__ import annotations
import re
import string
from typing import Dict, List, Optional, Sequence, Tuple
from models import Priority, Task

REQUIRED_KEYS: Tuple[str, ...] = ("id", "description", "status", "createdAt", "updatedAt")
INDENT = "  "

# order matters: backslash first so later replacements are not re-escaped
_ESCAPES: Tuple[Tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)
_UNESCAPES: Dict[str, str] = {
    '"': '"', "\\": "\\", "/": "/",
    "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t",
}
_HEX = frozenset(string.hexdigits)
_SURROGATE_PAIR = re.compile("[\ud800-\udbff][\udc00-\udfff]")


class MalformedRecord(ValueError):
    """A single record block could not be decoded."""


# -------------------- string escaping --------------------
def escape(text: str) -> str:
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def unescape(text: str) -> str:
    """Reverse escape(); also understands the remaining JSON escapes.

    Unknown escapes keep the escaped character (``\\q`` -> ``q``).
    """
    if "\\" not in text:
        return text
    out: List[str] = []
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c != "\\" or i + 1 == n:
            out.append(c)
            i += 1
            continue
        nxt = text[i + 1]
        hex_part = text[i + 2:i + 6]
        if nxt == "u" and len(hex_part) == 4 and all(h in _HEX for h in hex_part):
            out.append(chr(int(hex_part, 16)))
            i += 6
            continue
        out.append(_UNESCAPES.get(nxt, nxt))
        i += 2
    result = "".join(out)
    # json.dump(ensure_ascii=True) writes astral characters as surrogate pairs;
    # a lone surrogate is kept as is
    return _SURROGATE_PAIR.sub(_join_pair, result)


def _join_pair(match: re.Match) -> str:
    high, low = match.group()
    return chr(0x10000 + ((ord(high) - 0xD800) << 10) + (ord(low) - 0xDC00))


def _quote(text: str) -> str:
    return f'"{escape(text)}"'


# -------------------- boundary splitter --------------------
def split_top_level(text: str) -> List[str]:
    """Split on commas that are outside quoted strings and at brace depth 0.

    Pieces are whitespace-trimmed. Empty pieces between consecutive commas
    are kept; a trailing empty piece is not. An unbalanced ``}`` only drives
    the depth negative, it never raises.
    """
    pieces: List[str] = []
    current: List[str] = []
    in_quotes = False
    escaped = False
    depth = 0
    for c in text:
        if in_quotes:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == '"':
                in_quotes = False
        elif c == '"':
            in_quotes = True
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        elif c == "," and depth == 0:
            pieces.append("".join(current).strip())
            current = []
            continue
        current.append(c)
    tail = "".join(current).strip()
    if tail:
        pieces.append(tail)
    return pieces


# -------------------- record codec --------------------
def encode_task(task: Task) -> str:
    fields = (
        ("id", str(task.id)),
        ("description", _quote(task.description)),
        ("status", _quote(task.status)),
        ("priority", _quote(task.priority.value)),
        ("createdAt", _quote(task.created_at)),
        ("updatedAt", _quote(task.updated_at)),
    )
    body = ",\n".join(f'{INDENT}"{key}": {value}' for key, value in fields)
    return "{\n" + body + "\n}"


def _strip_braces(block: str) -> str:
    block = block.strip()
    if block.startswith("{"):
        block = block[1:]
    if block.endswith("}"):
        block = block[:-1]
    return block.strip()


def _decode_value(raw: str) -> Optional[str]:
    raw = raw.strip()
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return unescape(raw[1:-1])
    if raw == "null":
        return None
    return raw


def _decode_pairs(block: str) -> Dict[str, Optional[str]]:
    values: Dict[str, Optional[str]] = {}
    for pair in split_top_level(_strip_braces(block)):
        key, sep, value = pair.partition(":")
        if not sep:
            continue
        key = key.strip()
        if len(key) >= 2 and key.startswith('"') and key.endswith('"'):
            key = key[1:-1]
        values[key] = _decode_value(value)
    return values


def decode_task(block: str) -> Task:
    """Decode one ``{...}`` block; raises MalformedRecord on any problem."""
    try:
        values = _decode_pairs(block)
    except ValueError as exc:
        raise MalformedRecord(str(exc)) from exc
    missing = [key for key in REQUIRED_KEYS if values.get(key) is None]
    if missing:
        raise MalformedRecord(f"missing field(s): {', '.join(missing)}")
    raw_id = values["id"]
    try:
        task_id = int(raw_id)  # type: ignore[arg-type]
    except ValueError:
        raise MalformedRecord(f"id is not numeric: {raw_id!r}") from None
    return Task(
        id=task_id,
        description=values["description"],  # type: ignore[arg-type]
        status=values["status"],  # type: ignore[arg-type]
        priority=Priority.parse(values.get("priority")),
        created_at=values["createdAt"],  # type: ignore[arg-type]
        updated_at=values["updatedAt"],  # type: ignore[arg-type]
    )


# -------------------- document --------------------
def split_document(text: str) -> List[str]:
    """Break a document into normalized ``{...}`` record fragments."""
    text = text.strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    if not text.strip():
        return []
    fragments: List[str] = []
    for piece in split_top_level(text):
        if not piece:
            continue
        if not piece.startswith("{"):
            piece = "{" + piece
        if not piece.endswith("}"):
            piece = piece + "}"
        fragments.append(piece)
    return fragments


def decode_document(text: str) -> Tuple[List[Task], List[str]]:
    """Return (tasks in document order, warnings for dropped records)."""
    tasks: List[Task] = []
    warnings: List[str] = []
    for fragment in split_document(text):
        try:
            tasks.append(decode_task(fragment))
        except MalformedRecord as exc:
            warnings.append(f"Could not parse task: {' '.join(fragment.split())}: {exc}")
    return tasks, warnings


def encode_document(tasks: Sequence[Task]) -> str:
    blocks = []
    for task in tasks:
        blocks.append("\n".join(INDENT + line for line in encode_task(task).split("\n")))
    if not blocks:
        return "[\n]"
    return "[\n" + ",\n".join(blocks) + "\n]"
