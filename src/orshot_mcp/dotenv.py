"""Fill unset Orshot settings from ``.env`` files.

Reads ``~/.config/orshot-mcp/.env`` and then ``./.env``. Only the
variables :class:`~orshot_mcp.config.ServerConfig` reads are injected;
anything else in the files is reported, not exported, so a shared
``.env`` can't leak unrelated secrets into the server's environment.
"""

from __future__ import annotations

import os
import re
from collections.abc import Collection
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "orshot-mcp" / ".env"
LOCAL_ENV_PATH = Path(".env")

_ASSIGNMENT = re.compile(
    r"""^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$"""
)
_QUOTES = ("'", '"')


@dataclass
class DotenvReport:
    """What :func:`load_dotenv` did with each file it read."""

    injected: dict[str, str] = field(default_factory=dict)
    ignored: list[str] = field(default_factory=list)  # keys outside the allowed set
    malformed: list[str] = field(default_factory=list)  # "path:lineno"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """True when *current* is missing, blank, or an unexpanded ``$KEY`` reference.

    Some MCP hosts pass ``"${ORSHOT_API_KEY}"`` through literally when
    the variable isn't defined on their side.
    """
    if current is None:
        return True
    text = _unquote(current.strip()).strip()
    if not text:
        return True
    return text in (f"${key}", f"${{{key}}}") or text.startswith(f"${{{key}:-")


def parse_dotenv(path: Path) -> tuple[dict[str, str], list[int]]:
    """Parse *path* into ``(values, malformed_line_numbers)``.

    Accepts ``KEY=VALUE`` and ``export KEY=VALUE`` with optional matching
    quotes; blank lines and ``#`` comments are skipped. A missing file
    yields ``({}, [])``. Values are taken literally, without expansion.
    """
    if not path.is_file():
        return {}, []

    values: dict[str, str] = {}
    malformed: list[int] = []
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        match = _ASSIGNMENT.match(line)
        if match is None:
            malformed.append(lineno)
            continue
        values[match["key"]] = _unquote(match["value"].strip())
    return values, malformed


def load_dotenv(*paths: Path, keys: Collection[str] | None = None) -> DotenvReport:
    """Export values from *paths* for variables that are still unset.

    Args:
        paths: Files to read, highest precedence first. Defaults to
            :data:`DEFAULT_ENV_PATH` then :data:`LOCAL_ENV_PATH`.
        keys: Variables allowed to be exported; ``None`` allows all.

    Returns:
        DotenvReport. The process environment always wins over files.
    """
    if not paths:
        paths = (DEFAULT_ENV_PATH, LOCAL_ENV_PATH)

    report = DotenvReport()
    for path in paths:
        values, bad_lines = parse_dotenv(path)
        report.malformed.extend(f"{path}:{n}" for n in bad_lines)
        for key, value in values.items():
            if keys is not None and key not in keys:
                if key not in report.ignored:
                    report.ignored.append(key)
                continue
            if key in report.injected or not _needs_value(key, os.environ.get(key)):
                continue
            os.environ[key] = value
            report.injected[key] = value
    return report
