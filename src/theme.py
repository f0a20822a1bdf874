"""Color & style helpers for the decorated list style.

Decisions:
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Priority palette can be overridden via environment or project .env file.
"""
from __future__ import annotations
import logging
import os, sys
from pathlib import Path

logger = logging.getLogger(__name__)

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

PALETTE_KEYS = ('TASK_TRACKER_HIGH', 'TASK_TRACKER_MEDIUM', 'TASK_TRACKER_LOW')

def _code(part: str) -> str:
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _is_hex(value: str) -> bool:
    h = value.lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    return f"\033[38;5;{16 + 36 * r6 + 6 * g6 + b6}m"

def _from_hex(hex_code: str) -> str:
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return f"\033[38;2;{r};{g};{b}m"
    return _fg_256(r, g, b)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')

HEX_HIGH_DEFAULT = '#E5484D'
HEX_MEDIUM_DEFAULT = '#F5D90A'
HEX_LOW_DEFAULT = '#46A758'

def load_env_overrides(env_path: Path) -> dict[str, str]:
    """Read KEY=#rrggbb palette lines from a .env file; other lines are ignored."""
    overrides: dict[str, str] = {}
    if not env_path.exists():
        return overrides
    try:
        lines = env_path.read_text(encoding='utf-8').splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("ignoring unreadable %s: %s", env_path, exc)
        return overrides
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k, v = k.strip(), v.strip()
        if k in PALETTE_KEYS and _is_hex(v):
            overrides[k] = '#' + v.lstrip('#')
    return overrides

_ENV_OVERRIDES = load_env_overrides(Path(__file__).resolve().parent.parent / '.env')

def _resolve(key: str, default: str) -> str:
    """Priority: real env var > .env override > default."""
    value = os.environ.get(key)
    if value and _is_hex(value):
        return '#' + value.lstrip('#')
    return _ENV_OVERRIDES.get(key, default)

HEX_HIGH = _resolve('TASK_TRACKER_HIGH', HEX_HIGH_DEFAULT)
HEX_MEDIUM = _resolve('TASK_TRACKER_MEDIUM', HEX_MEDIUM_DEFAULT)
HEX_LOW = _resolve('TASK_TRACKER_LOW', HEX_LOW_DEFAULT)

# keyed by Priority.value so this module stays independent of models
PRIORITY_COLOR = {
    'high': _from_hex(HEX_HIGH) + BOLD,
    'medium': _from_hex(HEX_MEDIUM),
    'low': _from_hex(HEX_LOW),
}
STATUS_COLOR = {
    'todo': '',
    'in-progress': BOLD,
    'done': DIM,
}
HEADER_COLOR = BOLD

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE or not any(styles):
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','load_env_overrides','RESET','BOLD','DIM','PRIORITY_COLOR','STATUS_COLOR',
    'HEADER_COLOR','HEX_HIGH','HEX_MEDIUM','HEX_LOW',
]
