from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models.constants import Platform, parse_member
from ..models.errors import invalid_arguments


def load_capabilities(path: str) -> dict[str, Any]:
    """
    Read a WebDriver session payload ({"capabilities": {...}}) from a JSON file.
    """
    file_path = Path(path).expanduser()
    if not file_path.exists():
        raise invalid_arguments(f"Capabilities file not found: {file_path}")
    if file_path.is_dir():
        raise invalid_arguments(f"Expected a JSON file but found a directory: {file_path}")

    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise invalid_arguments(f"Invalid JSON in {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise invalid_arguments(f"Expected top-level JSON object in {file_path}")
    if not isinstance(data.get("capabilities"), dict):
        raise invalid_arguments(f"Missing 'capabilities' object in {file_path}")
    return data


def platform_from_capabilities(payload: dict[str, Any]) -> Platform:
    """
    Read `platformName` from alwaysMatch (or flat capabilities) as a Platform.

    Appium reports "Android"/"iOS"; the tag is lower-cased before validation.
    """
    caps = payload["capabilities"]
    always = caps.get("alwaysMatch") if isinstance(caps.get("alwaysMatch"), dict) else caps
    raw = always.get("platformName")
    if not isinstance(raw, str):
        raise invalid_arguments("Capabilities do not declare a platformName")
    return parse_member(Platform, raw.lower(), field="platformName")
