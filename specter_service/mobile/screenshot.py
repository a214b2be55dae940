from __future__ import annotations

import base64
from typing import Optional

import cv2
import numpy as np

from ..models.constants import DEFAULTS
from ..models.errors import invalid_arguments
from ..models.ui_context import ScreenshotData


def detect_image_format(data: bytes) -> str:
    if data[:4] == b"\x89PNG":
        return "png"
    if data[:3] == b"\xff\xd8\xff":
        return "jpeg"
    return "unknown"


def create_empty_screenshot() -> ScreenshotData:
    return ScreenshotData(data="", format="png", width=0, height=0, size_bytes=0, compressed=False)


def calculate_compression_ratio(original_size: int, compressed_size: int) -> int:
    """Percentage saved, e.g. 1000 -> 250 bytes is 75."""
    if original_size == 0:
        return 0
    return round((1 - compressed_size / original_size) * 100)


def _fit_inside(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    if width > height:
        return max_dimension, max(1, round(max_dimension * height / width))
    return max(1, round(max_dimension * width / height)), max_dimension


def compress_screenshot(
    image_bytes: bytes,
    *,
    quality: int = DEFAULTS["SCREENSHOT_QUALITY"],
    max_dimension: Optional[int] = None,
    fmt: str = "jpeg",
) -> ScreenshotData:
    """
    Re-encode a device screenshot for transport.

    `quality` is the JPEG quality; for PNG it is mapped onto zlib level 0-9
    (lower quality, higher compression). Images larger than `max_dimension`
    on either side are shrunk keeping the aspect ratio.
    """
    if not 1 <= quality <= 100:
        raise invalid_arguments(f"Screenshot quality must be between 1 and 100, got {quality}")
    if fmt not in ("jpeg", "png"):
        raise invalid_arguments(f"Unsupported screenshot format: {fmt!r}")

    if not image_bytes:
        raise invalid_arguments("Screenshot is empty (0 bytes)")

    try:
        img = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise invalid_arguments(f"Screenshot bytes could not be decoded as an image: {e}") from e
    if img is None:
        raise invalid_arguments("Screenshot bytes could not be decoded as an image")

    h, w = img.shape[:2]
    if max_dimension and (w > max_dimension or h > max_dimension):
        new_w, new_h = _fit_inside(w, h, max_dimension)
        img = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)
        h, w = img.shape[:2]

    try:
        if fmt == "jpeg":
            ok, encoded = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
        else:
            level = min(9, max(0, round((100 - quality) / 10)))
            ok, encoded = cv2.imencode(".png", img, [cv2.IMWRITE_PNG_COMPRESSION, level])
    except cv2.error as e:
        raise invalid_arguments(f"Failed to encode screenshot as {fmt}: {e}") from e
    if not ok:
        raise invalid_arguments(f"Failed to encode screenshot as {fmt}")

    out = encoded.tobytes()
    return ScreenshotData(
        data=base64.b64encode(out).decode("ascii"),
        format=fmt,
        width=int(w),
        height=int(h),
        size_bytes=len(out),
        compressed=True,
        quality=int(quality),
    )
