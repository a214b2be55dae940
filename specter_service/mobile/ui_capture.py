from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from ..models.constants import DEFAULTS, ElementType, Platform
from ..models.ui_context import ScreenshotData, UIContext, create_element_summary
from .appium_http_client import AppiumHTTPClient, AppiumHTTPError
from .screenshot import compress_screenshot, create_empty_screenshot
from .ui_normalizer import DEFAULT_MAX_DEPTH, extract_interactive_elements, parse_hierarchy

logger = logging.getLogger(__name__)

DEFAULT_SCREEN_SIZE: dict[Platform, tuple[int, int]] = {
    Platform.ANDROID: (1080, 2340),
    Platform.IOS: (390, 844),
}


def _capture_screenshot(client: AppiumHTTPClient, *, quality: int) -> ScreenshotData:
    try:
        return compress_screenshot(client.get_screenshot_png_bytes(), quality=quality)
    except (AppiumHTTPError, ValueError, RuntimeError) as e:
        logger.warning("Screenshot capture failed, continuing without it: %s", e)
        return create_empty_screenshot()


def capture_ui_context(
    client: AppiumHTTPClient,
    platform: Platform,
    *,
    device_id: str = "",
    include_all_elements: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    element_types: Optional[Iterable[ElementType]] = None,
    skip_screenshot: bool = False,
    screenshot_quality: Optional[int] = None,
) -> UIContext:
    """
    Snapshot the current screen of an open Appium session.

    Only interactive elements are returned unless `include_all_elements`;
    `total_element_count` always counts everything that was parsed.
    A failed screenshot does not fail the capture.
    """
    if not client.session_id:
        raise RuntimeError("No active Appium session. Call create_session() first.")

    screenshot = create_empty_screenshot()
    if not skip_screenshot:
        quality = screenshot_quality if screenshot_quality is not None else DEFAULTS["SCREENSHOT_QUALITY"]
        screenshot = _capture_screenshot(client, quality=quality)

    all_elements = parse_hierarchy(
        platform,
        client.get_page_source(),
        include_invisible=include_all_elements,
        max_depth=max_depth,
        element_types=element_types,
    )
    elements = all_elements if include_all_elements else extract_interactive_elements(all_elements)
    logger.debug("Parsed %d elements (%d kept) on %s", len(all_elements), len(elements), platform.value)

    default_w, default_h = DEFAULT_SCREEN_SIZE[platform]
    return UIContext(
        platform=platform,
        device_id=device_id or client.session_id,
        screenshot=screenshot,
        elements=elements,
        total_element_count=len(all_elements),
        screen_size=(screenshot.width or default_w, screenshot.height or default_h),
        timestamp=time.time(),
        summary=create_element_summary(elements),
    )
