"""
Turn native UI hierarchy dumps into flat lists of `UIElement`.

Android input is UIAutomator XML (`<hierarchy><node class=... bounds=...>`),
iOS input is the XCUITest page source Appium returns
(`<XCUIElementTypeButton type=... name=... x=... width=...>`).

Native class names are classified with the exact lookup tables first and
then with substring heuristics. Anything still unknown is `ElementType.OTHER`;
that fallback lives here, not in the tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional
from xml.etree import ElementTree

from ..models.constants import (
    ElementType,
    Platform,
    lookup_android_element_type,
    lookup_ios_element_type,
)
from ..models.errors import invalid_arguments
from ..models.ui_context import (
    Bounds,
    UIElement,
    calculate_center,
    filter_interactive_elements,
    generate_element_id,
    parse_android_bounds,
)

DEFAULT_MAX_DEPTH = 20

# (substrings of the lower-cased native name, category), checked in order.
_ANDROID_HEURISTICS: tuple[tuple[tuple[str, ...], ElementType], ...] = (
    (("button", "fab"), ElementType.BUTTON),
    (("edittext", "textinput", "autocomplete"), ElementType.INPUT),
    (("imageview", "icon"), ElementType.IMAGE),
    (("recyclerview", "listview", "gridview"), ElementType.LIST),
    (("scrollview", "nestedscroll"), ElementType.SCROLL),
    (("switch", "toggle"), ElementType.SWITCH),
    (("checkbox", "checkable"), ElementType.CHECKBOX),
    (("layout", "viewgroup", "frame", "constraint", "relative", "linear"), ElementType.CONTAINER),
)

_IOS_HEURISTICS: tuple[tuple[tuple[str, ...], ElementType], ...] = (
    (("button",), ElementType.BUTTON),
    (("textfield", "textview"), ElementType.INPUT),
    (("statictext", "label"), ElementType.TEXT),
    (("image",), ElementType.IMAGE),
    (("table", "collection"), ElementType.LIST),
    (("scroll",), ElementType.SCROLL),
    (("switch", "toggle"), ElementType.SWITCH),
    (("checkbox",), ElementType.CHECKBOX),
    (("cell", "other"), ElementType.CONTAINER),
)


def _match_heuristics(
    name: str,
    rules: tuple[tuple[tuple[str, ...], ElementType], ...],
) -> Optional[ElementType]:
    lowered = name.lower()
    for needles, element_type in rules:
        if any(needle in lowered for needle in needles):
            return element_type
    return None


def map_android_element_type(class_name: str) -> ElementType:
    mapped = lookup_android_element_type(class_name)
    if mapped is not None:
        return mapped

    guessed = _match_heuristics(class_name, _ANDROID_HEURISTICS[:2])
    if guessed is not None:
        return guessed
    lowered = class_name.lower()
    if "textview" in lowered and "edit" not in lowered:
        return ElementType.TEXT
    return _match_heuristics(class_name, _ANDROID_HEURISTICS[2:]) or ElementType.OTHER


def map_ios_element_type(type_name: str) -> ElementType:
    mapped = lookup_ios_element_type(type_name)
    if mapped is not None:
        return mapped
    return _match_heuristics(type_name, _IOS_HEURISTICS) or ElementType.OTHER


def map_element_type(platform: Platform, native_name: str) -> ElementType:
    if platform is Platform.ANDROID:
        return map_android_element_type(native_name)
    return map_ios_element_type(native_name)


@dataclass
class _RawNode:
    class_name: str
    type: ElementType
    bounds: Bounds
    text: Optional[str] = None
    content_description: Optional[str] = None
    resource_id: Optional[str] = None
    clickable: bool = False
    enabled: bool = True
    focused: bool = False
    visible: bool = True
    scrollable: bool = False
    is_password: bool = False
    children: list[ElementTree.Element] = field(default_factory=list)


def _flag(attrib: dict[str, str], key: str, *, default: bool = False) -> bool:
    value = attrib.get(key)
    if value is None:
        return default
    return value == "true"


def _int_attr(attrib: dict[str, str], key: str) -> int:
    try:
        return int(float(attrib.get(key, "0")))
    except ValueError:
        return 0


def _read_android_node(el: ElementTree.Element) -> _RawNode:
    attrib = el.attrib
    class_name = attrib.get("class") or "android.view.View"
    return _RawNode(
        class_name=class_name,
        type=map_android_element_type(class_name),
        bounds=parse_android_bounds(attrib.get("bounds", "")),
        text=attrib.get("text") or None,
        content_description=attrib.get("content-desc") or None,
        resource_id=attrib.get("resource-id") or None,
        clickable=_flag(attrib, "clickable"),
        enabled=_flag(attrib, "enabled"),
        focused=_flag(attrib, "focused"),
        visible=_flag(attrib, "visible-to-user"),
        scrollable=_flag(attrib, "scrollable"),
        is_password=_flag(attrib, "password"),
        children=el.findall("node"),
    )


def _read_ios_node(el: ElementTree.Element) -> _RawNode:
    attrib = el.attrib
    type_name = attrib.get("type") or el.tag
    element_type = map_ios_element_type(type_name)
    label = attrib.get("label") or None
    return _RawNode(
        class_name=type_name,
        type=element_type,
        bounds=Bounds(
            x=_int_attr(attrib, "x"),
            y=_int_attr(attrib, "y"),
            width=_int_attr(attrib, "width"),
            height=_int_attr(attrib, "height"),
        ),
        text=label or attrib.get("value") or None,
        content_description=label,
        resource_id=attrib.get("name") or None,
        clickable=element_type in (ElementType.BUTTON, ElementType.INPUT, ElementType.SWITCH),
        enabled=_flag(attrib, "enabled", default=True),
        focused=_flag(attrib, "focused"),
        visible=_flag(attrib, "visible", default=True),
        scrollable=element_type in (ElementType.SCROLL, ElementType.LIST),
        is_password=type_name == "XCUIElementTypeSecureTextField",
        children=list(el),
    )


def _flatten(
    roots: Iterable[ElementTree.Element],
    read_node: Callable[[ElementTree.Element], _RawNode],
    *,
    include_invisible: bool,
    max_depth: int,
    element_types: Optional[Iterable[ElementType]],
    emit_zero_sized: bool,
) -> list[UIElement]:
    wanted = frozenset(element_types) if element_types else None
    elements: list[UIElement] = []

    def visit(el: ElementTree.Element, depth: int, sibling_index: int) -> None:
        if depth > max_depth:
            return
        raw = read_node(el)
        if not raw.visible and not include_invisible:
            return
        zero_sized = raw.bounds.width == 0 and raw.bounds.height == 0
        if zero_sized and not raw.visible:
            return

        emit = (emit_zero_sized or not zero_sized) and (wanted is None or raw.type in wanted)
        if emit:
            elements.append(
                UIElement(
                    id=generate_element_id(len(elements), depth, raw.resource_id),
                    type=raw.type,
                    class_name=raw.class_name,
                    bounds=raw.bounds,
                    center=calculate_center(raw.bounds),
                    text=raw.text,
                    content_description=raw.content_description,
                    resource_id=raw.resource_id,
                    clickable=raw.clickable,
                    enabled=raw.enabled,
                    focused=raw.focused,
                    visible=raw.visible,
                    scrollable=raw.scrollable,
                    is_password=raw.is_password,
                    depth=depth,
                    index=sibling_index,
                )
            )

        for i, child in enumerate(raw.children):
            visit(child, depth + 1, i)

    for i, root in enumerate(roots):
        visit(root, 0, i)
    return elements


def _parse_xml(page_source_xml: str, *, platform: str) -> Optional[ElementTree.Element]:
    if not page_source_xml.strip():
        return None
    try:
        return ElementTree.fromstring(page_source_xml)
    except ElementTree.ParseError as e:
        raise invalid_arguments(f"Failed to parse {platform} UI hierarchy XML: {e}") from e


def parse_android_hierarchy(
    page_source_xml: str,
    *,
    include_invisible: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    element_types: Optional[Iterable[ElementType]] = None,
) -> list[UIElement]:
    """
    Flatten a UIAutomator dump in document order.

    Invisible nodes are dropped together with their subtree unless
    `include_invisible`. Nodes filtered out by `element_types` still have
    their children visited.
    """
    root = _parse_xml(page_source_xml, platform="Android")
    if root is None:
        return []
    roots = root.findall("node") if root.tag == "hierarchy" else [root]
    return _flatten(
        roots,
        _read_android_node,
        include_invisible=include_invisible,
        max_depth=max_depth,
        element_types=element_types,
        emit_zero_sized=True,
    )


def parse_ios_hierarchy(
    page_source_xml: str,
    *,
    include_invisible: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    element_types: Optional[Iterable[ElementType]] = None,
) -> list[UIElement]:
    """
    Flatten an XCUITest page source. Zero-sized elements are not emitted but
    their children are.
    """
    root = _parse_xml(page_source_xml, platform="iOS")
    if root is None:
        return []
    roots = list(root) if root.tag == "AppiumAUT" else [root]
    return _flatten(
        roots,
        _read_ios_node,
        include_invisible=include_invisible,
        max_depth=max_depth,
        element_types=element_types,
        emit_zero_sized=False,
    )


def parse_hierarchy(
    platform: Platform,
    page_source_xml: str,
    *,
    include_invisible: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    element_types: Optional[Iterable[ElementType]] = None,
) -> list[UIElement]:
    parser = parse_android_hierarchy if platform is Platform.ANDROID else parse_ios_hierarchy
    return parser(
        page_source_xml,
        include_invisible=include_invisible,
        max_depth=max_depth,
        element_types=element_types,
    )


def extract_interactive_elements(elements: list[UIElement]) -> list[UIElement]:
    return filter_interactive_elements(elements)
