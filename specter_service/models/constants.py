"""
Platform-agnostic vocabulary shared across the service.

Each closed set of tags is exposed twice:
- as a `str`-valued Enum, for code that wants a tagged type
- as a tuple of raw tags, for validating external input

The `is_*` guards accept anything and never raise. `parse_member` is the
boundary converter that turns a raw string into an Enum member (or fails
with INVALID_ARGUMENTS).
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, TypeVar

from .errors import invalid_arguments


class Platform(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class BuildVariant(str, Enum):
    DEBUG = "debug"
    RELEASE = "release"


class KmmModule(str, Enum):
    SHARED = "shared"
    COMMON_MAIN = "commonMain"
    COMMON_TEST = "commonTest"
    ANDROID_MAIN = "androidMain"
    IOS_MAIN = "iosMain"


class InteractionType(str, Enum):
    TAP = "tap"
    LONG_PRESS = "long_press"
    SWIPE = "swipe"
    INPUT_TEXT = "input_text"
    CLEAR = "clear"


class SwipeDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class DeviceStatus(str, Enum):
    BOOTED = "booted"
    SHUTDOWN = "shutdown"
    BOOTING = "booting"
    UNKNOWN = "unknown"


class LogLevel(str, Enum):
    """
    Device log severities.

    Declaration order is not a severity ranking; do not compare members by
    position.
    """

    VERBOSE = "verbose"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class ElementType(str, Enum):
    """Unified cross-platform UI widget category."""

    BUTTON = "button"
    TEXT = "text"
    INPUT = "input"
    IMAGE = "image"
    LIST = "list"
    SCROLL = "scroll"
    CONTAINER = "container"
    SWITCH = "switch"
    CHECKBOX = "checkbox"
    OTHER = "other"


class CrashPatternType(str, Enum):
    NULL_POINTER = "null_pointer"
    ARRAY_BOUNDS = "array_bounds"
    THREADING_VIOLATION = "threading_violation"
    STACK_OVERFLOW = "stack_overflow"
    ASSERTION_FAILURE = "assertion_failure"
    MEMORY_CORRUPTION = "memory_corruption"
    UNKNOWN = "unknown"


class LintSource(str, Enum):
    DETEKT = "detekt"
    ANDROID_LINT = "android-lint"
    KTLINT = "ktlint"


class EnvAction(str, Enum):
    BOOT = "boot"
    SHUTDOWN = "shutdown"
    WIPE = "wipe"


def _tags(enum_cls: type[Enum]) -> tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


PLATFORMS = _tags(Platform)
BUILD_VARIANTS = _tags(BuildVariant)
KMM_MODULES = _tags(KmmModule)
INTERACTION_TYPES = _tags(InteractionType)
SWIPE_DIRECTIONS = _tags(SwipeDirection)
DEVICE_STATUSES = _tags(DeviceStatus)
LOG_LEVELS = _tags(LogLevel)
ELEMENT_TYPES = _tags(ElementType)
CRASH_PATTERN_TYPES = _tags(CrashPatternType)
LINT_SOURCES = _tags(LintSource)
ENV_ACTIONS = _tags(EnvAction)

# Lookup by the name external callers use (CLI, MCP tools).
ENUMERATIONS: Mapping[str, type[Enum]] = MappingProxyType(
    {
        "platform": Platform,
        "build_variant": BuildVariant,
        "kmm_module": KmmModule,
        "interaction_type": InteractionType,
        "swipe_direction": SwipeDirection,
        "device_status": DeviceStatus,
        "log_level": LogLevel,
        "element_type": ElementType,
        "crash_pattern_type": CrashPatternType,
        "lint_source": LintSource,
        "env_action": EnvAction,
    }
)

_MEMBER_SETS: dict[type[Enum], frozenset[str]] = {
    enum_cls: frozenset(_tags(enum_cls)) for enum_cls in ENUMERATIONS.values()
}


DEFAULTS: Mapping[str, int] = MappingProxyType(
    {
        "BUILD_TIMEOUT_MS": 30 * 60 * 1000,
        "SHELL_TIMEOUT_MS": 30 * 1000,
        "LOG_LIMIT": 100,
        "SCREENSHOT_QUALITY": 50,
        "DEVICE_BOOT_TIMEOUT_MS": 2 * 60 * 1000,
    }
)


# Keys are exactly what UIAutomator reports in the `class` attribute.
ANDROID_ELEMENT_MAP: Mapping[str, ElementType] = MappingProxyType(
    {
        "android.widget.Button": ElementType.BUTTON,
        "android.widget.TextView": ElementType.TEXT,
        "android.widget.EditText": ElementType.INPUT,
        "android.widget.ImageView": ElementType.IMAGE,
        "androidx.recyclerview.widget.RecyclerView": ElementType.LIST,
        "android.widget.ListView": ElementType.LIST,
        "android.widget.ScrollView": ElementType.SCROLL,
        "android.widget.HorizontalScrollView": ElementType.SCROLL,
        "android.view.ViewGroup": ElementType.CONTAINER,
        "android.widget.LinearLayout": ElementType.CONTAINER,
        "android.widget.FrameLayout": ElementType.CONTAINER,
        "android.widget.RelativeLayout": ElementType.CONTAINER,
        "android.widget.Switch": ElementType.SWITCH,
        "android.widget.CheckBox": ElementType.CHECKBOX,
    }
)

# Keys are XCUITest element type names.
IOS_ELEMENT_MAP: Mapping[str, ElementType] = MappingProxyType(
    {
        "XCUIElementTypeButton": ElementType.BUTTON,
        "XCUIElementTypeStaticText": ElementType.TEXT,
        "XCUIElementTypeTextField": ElementType.INPUT,
        "XCUIElementTypeTextView": ElementType.INPUT,
        "XCUIElementTypeSecureTextField": ElementType.INPUT,
        "XCUIElementTypeImage": ElementType.IMAGE,
        "XCUIElementTypeTable": ElementType.LIST,
        "XCUIElementTypeCollectionView": ElementType.LIST,
        "XCUIElementTypeScrollView": ElementType.SCROLL,
        "XCUIElementTypeOther": ElementType.CONTAINER,
        "XCUIElementTypeCell": ElementType.CONTAINER,
        "XCUIElementTypeSwitch": ElementType.SWITCH,
        "XCUIElementTypeCheckBox": ElementType.CHECKBOX,
    }
)


def lookup_android_element_type(class_name: str) -> Optional[ElementType]:
    """Exact lookup in ANDROID_ELEMENT_MAP. None means the class is unmapped."""
    return ANDROID_ELEMENT_MAP.get(class_name)


def lookup_ios_element_type(type_name: str) -> Optional[ElementType]:
    """Exact lookup in IOS_ELEMENT_MAP. None means the type is unmapped."""
    return IOS_ELEMENT_MAP.get(type_name)


def is_member(enum_cls: type[Enum], value: Any) -> bool:
    if not isinstance(value, str):
        return False
    members = _MEMBER_SETS.get(enum_cls)
    if members is None:
        members = frozenset(_tags(enum_cls))
    return value in members


def is_platform(value: Any) -> bool:
    return is_member(Platform, value)


def is_build_variant(value: Any) -> bool:
    return is_member(BuildVariant, value)


def is_kmm_module(value: Any) -> bool:
    return is_member(KmmModule, value)


def is_interaction_type(value: Any) -> bool:
    return is_member(InteractionType, value)


def is_swipe_direction(value: Any) -> bool:
    return is_member(SwipeDirection, value)


def is_device_status(value: Any) -> bool:
    return is_member(DeviceStatus, value)


def is_log_level(value: Any) -> bool:
    return is_member(LogLevel, value)


def is_element_type(value: Any) -> bool:
    return is_member(ElementType, value)


def is_crash_pattern_type(value: Any) -> bool:
    return is_member(CrashPatternType, value)


def is_lint_source(value: Any) -> bool:
    return is_member(LintSource, value)


def is_env_action(value: Any) -> bool:
    return is_member(EnvAction, value)


E = TypeVar("E", bound=Enum)


def parse_member(enum_cls: type[E], value: Any, *, field: str) -> E:
    """
    Convert a raw boundary value into a member of `enum_cls`.

    Matching is exact and case-sensitive, same as the `is_*` guards.
    """
    if isinstance(value, enum_cls):
        return value
    if not is_member(enum_cls, value):
        valid = ", ".join(_tags(enum_cls))
        raise invalid_arguments(f"Invalid {field}: {value!r}. Expected one of: {valid}")
    return enum_cls(value)
