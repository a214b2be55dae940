"""
Data model shared by the mobile helpers, the MCP server and the CLI.
"""

from .constants import (
    ANDROID_ELEMENT_MAP,
    DEFAULTS,
    ELEMENT_TYPES,
    IOS_ELEMENT_MAP,
    PLATFORMS,
    ElementType,
    Platform,
    is_build_variant,
    is_device_status,
    is_log_level,
    is_platform,
    lookup_android_element_type,
    lookup_ios_element_type,
    parse_member,
)
from .errors import ErrorCode, SpecterToolError

__all__ = [
    "ANDROID_ELEMENT_MAP",
    "DEFAULTS",
    "ELEMENT_TYPES",
    "IOS_ELEMENT_MAP",
    "PLATFORMS",
    "ElementType",
    "Platform",
    "is_build_variant",
    "is_device_status",
    "is_log_level",
    "is_platform",
    "lookup_android_element_type",
    "lookup_ios_element_type",
    "parse_member",
    "ErrorCode",
    "SpecterToolError",
]
