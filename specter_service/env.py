from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

_loaded_from: Optional[Path] = None


def default_dotenv_path() -> Path:
    """
    `SPECTER_DOTENV` if set, else `.env` at the repo root.
    """
    explicit = os.environ.get("SPECTER_DOTENV")
    if explicit:
        return Path(explicit).expanduser().resolve()
    # specter_service/env.py -> repo root is one level up
    return Path(__file__).resolve().parents[1] / ".env"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def parse_dotenv(text: str) -> dict[str, str]:
    """
    Parse KEY=VALUE lines. Blank lines, '#' comments and lines without '='
    are skipped; an `export ` prefix and matching quotes are stripped.
    """
    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            values[key] = _unquote(value.strip())
    return values


def apply_env(
    values: Mapping[str, str],
    *,
    environ: Optional[MutableMapping[str, str]] = None,
    override: bool = False,
) -> dict[str, str]:
    """
    Copy `values` into the environment. Existing keys win unless `override`.
    Returns the keys that were actually written.
    """
    target = os.environ if environ is None else environ
    written: dict[str, str] = {}
    for key, value in values.items():
        if not override and target.get(key) is not None:
            continue
        target[key] = value
        written[key] = value
    return written


def load_dotenv(*, path: Optional[str | Path] = None, override: bool = False) -> dict[str, str]:
    dotenv_path = Path(path).expanduser().resolve() if path is not None else default_dotenv_path()
    if not dotenv_path.exists():
        return {}
    if dotenv_path.is_dir():
        raise RuntimeError(f".env path is a directory: {dotenv_path}")
    return apply_env(parse_dotenv(dotenv_path.read_text(encoding="utf-8")), override=override)


def ensure_dotenv_loaded() -> dict[str, str]:
    """
    Load the default .env once per process; later calls are no-ops.
    """
    global _loaded_from
    if _loaded_from is not None:
        return {}
    path = default_dotenv_path()
    written = load_dotenv(path=path)
    _loaded_from = path
    return written
