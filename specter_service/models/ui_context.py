from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from .constants import ElementType, Platform


@dataclass(frozen=True)
class Bounds:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class UIElement:
    """
    One node of a screen, normalized across Android and iOS.

    `class_name` keeps the platform-native name the `type` was derived from.
    """

    id: str
    type: ElementType
    class_name: str
    bounds: Bounds
    center: Point
    text: Optional[str] = None
    content_description: Optional[str] = None
    resource_id: Optional[str] = None
    clickable: bool = False
    enabled: bool = True
    focused: bool = False
    visible: bool = True
    scrollable: bool = False
    is_password: bool = False
    depth: int = 0
    index: int = 0


@dataclass(frozen=True)
class ScreenshotData:
    data: str
    format: str
    width: int
    height: int
    size_bytes: int
    compressed: bool
    quality: Optional[int] = None


@dataclass(frozen=True)
class UIContext:
    platform: Platform
    device_id: str
    screenshot: ScreenshotData
    elements: list[UIElement]
    total_element_count: int
    screen_size: tuple[int, int]
    timestamp: float
    foreground_app: Optional[str] = None
    summary: str = field(default="")

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["platform"] = self.platform.value
        payload["elements"] = [element_to_dict(el) for el in self.elements]
        payload["screen_size"] = {"width": self.screen_size[0], "height": self.screen_size[1]}
        return payload


def element_to_dict(element: UIElement) -> dict[str, Any]:
    payload = asdict(element)
    payload["type"] = element.type.value
    return payload


_BOUNDS_RE = re.compile(r"\[(\d+),(\d+)\]\[(\d+),(\d+)\]")
_RESOURCE_ID_PREFIX_RE = re.compile(r".*:id/")

INTERACTIVE_TYPES = frozenset(
    {ElementType.BUTTON, ElementType.INPUT, ElementType.SWITCH, ElementType.CHECKBOX}
)


def calculate_center(bounds: Bounds) -> Point:
    # Half-up rounding; Python's round() would round .5 to even.
    return Point(
        x=int(bounds.x + bounds.width / 2 + 0.5),
        y=int(bounds.y + bounds.height / 2 + 0.5),
    )


def parse_android_bounds(bounds_str: str) -> Bounds:
    """
    Parse UIAutomator bounds "[x1,y1][x2,y2]". Unparseable input gives zero-sized bounds at the origin.
    """
    match = _BOUNDS_RE.search(bounds_str or "")
    if not match:
        return Bounds(x=0, y=0, width=0, height=0)
    x1, y1, x2, y2 = (int(match.group(i)) for i in range(1, 5))
    return Bounds(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


def generate_element_id(index: int, depth: int, resource_id: Optional[str] = None) -> str:
    if resource_id:
        return _RESOURCE_ID_PREFIX_RE.sub("", resource_id, count=1)
    return f"elem_{depth}_{index}"


def is_interactive(element: UIElement) -> bool:
    if not element.visible or not element.enabled:
        return False
    return element.clickable or element.type in INTERACTIVE_TYPES


def filter_interactive_elements(elements: list[UIElement]) -> list[UIElement]:
    return [el for el in elements if is_interactive(el)]


def find_element(elements: list[UIElement], query: str) -> Optional[UIElement]:
    """
    Find an element by id, then by exact text, then by case-insensitive substring.
    """
    for el in elements:
        if el.id == query or el.resource_id == query:
            return el
    for el in elements:
        if el.text == query or el.content_description == query:
            return el

    q = query.lower()
    for el in elements:
        for candidate in (el.text, el.content_description, el.resource_id):
            if candidate and q in candidate.lower():
                return el
    return None


def count_elements_by_type(elements: list[UIElement]) -> dict[ElementType, int]:
    counts: dict[ElementType, int] = {}
    for el in elements:
        counts[el.type] = counts.get(el.type, 0) + 1
    return counts


def create_element_summary(elements: list[UIElement], *, max_interactive: int = 10) -> str:
    interactive: list[str] = []
    for el in elements:
        if el.clickable or el.type in (ElementType.BUTTON, ElementType.INPUT):
            identifier = el.resource_id or el.text or el.content_description or el.id
            if identifier:
                interactive.append(f"{el.type.value}: {identifier}")

    types_summary = ", ".join(
        f"{element_type.value}: {count}" for element_type, count in count_elements_by_type(elements).items()
    )
    listed = ", ".join(interactive[:max_interactive])
    if len(interactive) > max_interactive:
        listed += "..."
    return f"Elements: {types_summary}\nInteractive: {listed}"
