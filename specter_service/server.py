from __future__ import annotations

import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from .config import configure_logging, get_config, validate_config
from .models.constants import (
    DEFAULTS,
    ENUMERATIONS,
    ElementType,
    LintSource,
    LogLevel,
    Platform,
    is_member,
    lookup_android_element_type,
    lookup_ios_element_type,
    parse_member,
)
from .models.errors import invalid_arguments
from .models.lint_result import build_lint_result, create_lint_summary, lint_issue_to_dict, parse_lint_report
from .models.log_entry import (
    LogFilter,
    filter_log_entries,
    generate_log_summary,
    log_entry_to_dict,
    parse_log_output,
)
from .models.ui_context import create_element_summary, element_to_dict
from .mobile.appium_http_client import AppiumHTTPClient
from .mobile.capabilities import load_capabilities, platform_from_capabilities
from .mobile.ui_capture import capture_ui_context
from .mobile.ui_normalizer import extract_interactive_elements, map_element_type, parse_hierarchy

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "specter-mcp",
    instructions=(
        "Shared mobile vocabulary for Android and iOS. "
        "Use list_vocabulary/validate_value to check tags, classify_element to map native widget "
        "names, summarize_ui_source for a captured hierarchy, get_ui_context for a live screen. "
        "summarize_device_logs and summarize_lint_report digest logcat/OSLog output and linter reports."
    ),
)


def _enumeration(name: str) -> Any:
    enum_cls = ENUMERATIONS.get(name)
    if enum_cls is None:
        raise invalid_arguments(
            f"Unknown enumeration {name!r}. Expected one of: {', '.join(ENUMERATIONS)}"
        )
    return enum_cls


@mcp.tool()
def list_vocabulary(name: Optional[str] = None) -> dict[str, Any]:
    """
    List valid tags for every enumeration, or for a single one by name.
    """
    if name is not None:
        return {name: [m.value for m in _enumeration(name)]}
    return {key: [m.value for m in enum_cls] for key, enum_cls in ENUMERATIONS.items()}


@mcp.tool()
def validate_value(enumeration: str, value: str) -> dict[str, Any]:
    """
    Check whether `value` is a valid tag of `enumeration` (exact, case-sensitive).
    """
    enum_cls = _enumeration(enumeration)
    valid = is_member(enum_cls, value)
    out: dict[str, Any] = {"enumeration": enumeration, "value": value, "valid": valid}
    if not valid:
        out["expected"] = [m.value for m in enum_cls]
    return out


@mcp.tool()
def classify_element(platform: str, native_name: str) -> dict[str, Any]:
    """
    Map a native widget class (Android) or XCUIElementType (iOS) to the unified element type.

    `mapped` is the exact table hit (null if unmapped); `element_type` also
    applies name heuristics and falls back to "other".
    """
    target = parse_member(Platform, platform, field="platform")
    lookup = lookup_android_element_type if target is Platform.ANDROID else lookup_ios_element_type
    mapped = lookup(native_name)
    return {
        "platform": target.value,
        "native_name": native_name,
        "mapped": mapped.value if mapped is not None else None,
        "element_type": map_element_type(target, native_name).value,
    }


@mcp.tool()
def summarize_ui_source(
    platform: str,
    xml: str,
    include_all_elements: bool = False,
    element_types: Optional[list[str]] = None,
) -> dict[str, Any]:
    """
    Parse a captured UI hierarchy (UIAutomator or XCUITest XML) into unified elements.
    """
    target = parse_member(Platform, platform, field="platform")
    wanted = [parse_member(ElementType, t, field="element_types") for t in element_types or []]
    all_elements = parse_hierarchy(
        target,
        xml,
        include_invisible=include_all_elements,
        element_types=wanted or None,
    )
    elements = all_elements if include_all_elements else extract_interactive_elements(all_elements)
    return {
        "platform": target.value,
        "total_element_count": len(all_elements),
        "elements": [element_to_dict(el) for el in elements],
        "summary": create_element_summary(elements),
    }


@mcp.tool()
def get_defaults() -> dict[str, int]:
    """
    Fallback timeouts and limits used when a caller gives no override.
    """
    return dict(DEFAULTS)


@mcp.tool()
def summarize_device_logs(
    platform: str,
    log_output: str,
    min_level: Optional[str] = None,
    tags: Optional[list[str]] = None,
    pattern: Optional[str] = None,
    limit: Optional[int] = None,
    app_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Parse raw logcat (android) or unified-log (ios) output, filter it and summarize.

    `limit` keeps the newest entries and defaults to LOG_LIMIT; pass 0 for no cap.
    """
    target = parse_member(Platform, platform, field="platform")
    entries = parse_log_output(target, log_output)
    log_filter = LogFilter(
        min_level=parse_member(LogLevel, min_level, field="min_level") if min_level is not None else None,
        tags=tuple(tags or ()),
        pattern=pattern,
        limit=DEFAULTS["LOG_LIMIT"] if limit is None else limit,
    )
    filtered = filter_log_entries(entries, log_filter)
    return {
        "platform": target.value,
        "total_entries": len(entries),
        "entries": [log_entry_to_dict(e) for e in filtered],
        "summary": generate_log_summary(target, filtered, app_id=app_id),
    }


@mcp.tool()
def summarize_lint_report(linter: str, report_xml: str) -> dict[str, Any]:
    """
    Parse a detekt, ktlint (checkstyle reporter) or Android Lint XML report.
    """
    source = parse_member(LintSource, linter, field="linter")
    result = build_lint_result(source, parse_lint_report(source, report_xml))
    return {
        "linter": source.value,
        "success": result.success,
        "total_issues": result.total_issues,
        "error_count": result.error_count,
        "warning_count": result.warning_count,
        "issues": [lint_issue_to_dict(i) for f in result.files for i in f.issues],
        "summary": create_lint_summary(result),
    }


@mcp.tool()
def get_ui_context(
    capabilities_json_path: str,
    appium_server_url: Optional[str] = None,
    include_all_elements: bool = False,
    skip_screenshot: bool = False,
    screenshot_quality: Optional[int] = None,
) -> dict[str, Any]:
    """
    Open an Appium session from a capabilities JSON file, capture the current screen, close the session.
    """
    payload = load_capabilities(capabilities_json_path)
    platform = platform_from_capabilities(payload)
    cfg = get_config()

    client = AppiumHTTPClient(appium_server_url or cfg.appium_server_url)
    with client.session(payload):
        context = capture_ui_context(
            client,
            platform,
            include_all_elements=include_all_elements,
            skip_screenshot=skip_screenshot,
            screenshot_quality=screenshot_quality if screenshot_quality is not None else cfg.screenshot_quality,
        )
    return context.to_dict()


def main() -> None:
    cfg = get_config()
    configure_logging(cfg)
    for warning in validate_config(cfg):
        logger.warning(warning)
    logger.info("Starting %s %s", cfg.server_name, cfg.server_version)
    mcp.run()


if __name__ == "__main__":
    main()
