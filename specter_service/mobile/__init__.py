"""
Read-only mobile UI helpers (Android/iOS) built around Appium.

Nothing here drives the app: it captures page source and screenshots and
normalizes them into the shared `UIElement` model.
"""

from .appium_http_client import AppiumHTTPClient, AppiumHTTPError
from .ui_capture import capture_ui_context
from .ui_normalizer import (
    map_android_element_type,
    map_ios_element_type,
    parse_android_hierarchy,
    parse_hierarchy,
    parse_ios_hierarchy,
)

__all__ = [
    "AppiumHTTPClient",
    "AppiumHTTPError",
    "capture_ui_context",
    "map_android_element_type",
    "map_ios_element_type",
    "parse_android_hierarchy",
    "parse_hierarchy",
    "parse_ios_hierarchy",
]
