"""Tests for the shared vocabulary: enumerations, guards, lookup tables, defaults."""
import itertools
from types import MappingProxyType

import pytest

from specter_service.models import constants as c
from specter_service.models.errors import ErrorCode, SpecterToolError


GUARDS = [
    (c.is_platform, c.PLATFORMS),
    (c.is_build_variant, c.BUILD_VARIANTS),
    (c.is_kmm_module, c.KMM_MODULES),
    (c.is_interaction_type, c.INTERACTION_TYPES),
    (c.is_swipe_direction, c.SWIPE_DIRECTIONS),
    (c.is_device_status, c.DEVICE_STATUSES),
    (c.is_log_level, c.LOG_LEVELS),
    (c.is_element_type, c.ELEMENT_TYPES),
    (c.is_crash_pattern_type, c.CRASH_PATTERN_TYPES),
    (c.is_lint_source, c.LINT_SOURCES),
    (c.is_env_action, c.ENV_ACTIONS),
]


def test_enumeration_members_in_declared_order():
    """Test each tag tuple lists exactly the documented members."""
    assert c.PLATFORMS == ("android", "ios")
    assert c.BUILD_VARIANTS == ("debug", "release")
    assert c.KMM_MODULES == ("shared", "commonMain", "commonTest", "androidMain", "iosMain")
    assert c.INTERACTION_TYPES == ("tap", "long_press", "swipe", "input_text", "clear")
    assert c.SWIPE_DIRECTIONS == ("up", "down", "left", "right")
    assert c.DEVICE_STATUSES == ("booted", "shutdown", "booting", "unknown")
    assert c.LOG_LEVELS == ("verbose", "debug", "info", "warning", "error", "fatal")
    assert c.ELEMENT_TYPES == (
        "button", "text", "input", "image", "list", "scroll", "container", "switch", "checkbox", "other",
    )
    assert c.CRASH_PATTERN_TYPES == (
        "null_pointer",
        "array_bounds",
        "threading_violation",
        "stack_overflow",
        "assertion_failure",
        "memory_corruption",
        "unknown",
    )
    assert c.LINT_SOURCES == ("detekt", "android-lint", "ktlint")
    assert c.ENV_ACTIONS == ("boot", "shutdown", "wipe")


def test_enum_members_are_their_tags():
    """Test enum members compare equal to their raw tags."""
    assert c.Platform.ANDROID == "android"
    assert c.LintSource.ANDROID_LINT.value == "android-lint"
    assert c.KmmModule("commonMain") is c.KmmModule.COMMON_MAIN
    assert len(c.ENUMERATIONS) == 11


@pytest.mark.parametrize("guard,members", GUARDS)
def test_guard_accepts_every_member(guard, members):
    """Test every declared tag passes its own guard."""
    for member in members:
        assert guard(member) is True


@pytest.mark.parametrize("guard,members", GUARDS)
def test_guard_rejects_empty_and_case_variants(guard, members):
    """Test matching is exact and case-sensitive."""
    assert guard("") is False
    for member in members:
        assert guard(member.upper()) is False
        assert guard(f" {member}") is False


@pytest.mark.parametrize("guard,members", GUARDS)
def test_guard_rejects_non_strings(guard, members):
    """Test non-string input is a plain negative, not an error."""
    assert guard(None) is False
    assert guard(1) is False
    assert guard(list(members)) is False


def test_guards_do_not_accept_other_enumerations_tags():
    """Test a tag of one enumeration is rejected by another's guard unless both declare it."""
    for (guard_a, members_a), (_, members_b) in itertools.permutations(GUARDS, 2):
        for value in members_b:
            assert guard_a(value) is (value in members_a)


def test_guard_examples():
    """Test the documented example scenarios."""
    assert c.is_platform("android") is True
    assert c.is_platform("Android") is False
    assert c.is_platform("web") is False
    assert c.is_platform("booted") is False
    assert c.is_log_level("fatal") is True
    assert c.is_log_level("") is False
    assert c.is_build_variant("release") is True
    assert c.is_device_status("booting") is True
    assert c.is_device_status("running") is False


def test_guard_accepts_enum_member():
    """Test Enum members pass guards since they are str subclasses."""
    assert c.is_platform(c.Platform.IOS) is True


def test_parse_member_converts_raw_string():
    """Test boundary conversion to a tagged member."""
    assert c.parse_member(c.Platform, "ios", field="platform") is c.Platform.IOS
    assert c.parse_member(c.SwipeDirection, c.SwipeDirection.UP, field="direction") is c.SwipeDirection.UP


def test_parse_member_rejects_invalid():
    """Test invalid boundary input raises INVALID_ARGUMENTS listing valid tags."""
    with pytest.raises(SpecterToolError) as exc:
        c.parse_member(c.Platform, "Android", field="platform")
    assert exc.value.code is ErrorCode.INVALID_ARGUMENTS
    assert "android, ios" in exc.value.message
    assert "'Android'" in exc.value.message


def test_android_table_values_are_element_types():
    """Test every Android key maps to exactly one unified element type."""
    assert len(c.ANDROID_ELEMENT_MAP) == 14
    for value in c.ANDROID_ELEMENT_MAP.values():
        assert isinstance(value, c.ElementType)
        assert value in c.ELEMENT_TYPES


def test_ios_table_values_are_element_types():
    """Test every iOS key maps to exactly one unified element type."""
    assert len(c.IOS_ELEMENT_MAP) == 13
    for value in c.IOS_ELEMENT_MAP.values():
        assert isinstance(value, c.ElementType)


def test_tables_are_separate():
    """Test the Android and iOS tables share no keys and are not merged."""
    assert not set(c.ANDROID_ELEMENT_MAP) & set(c.IOS_ELEMENT_MAP)
    assert c.lookup_android_element_type("XCUIElementTypeButton") is None
    assert c.lookup_ios_element_type("android.widget.Button") is None


def test_android_lookup():
    """Test exact Android lookups hit and unknown classes report not found."""
    assert c.lookup_android_element_type("android.widget.Button") == "button"
    assert c.lookup_android_element_type("androidx.recyclerview.widget.RecyclerView") is c.ElementType.LIST
    assert c.lookup_android_element_type("android.widget.CheckBox") is c.ElementType.CHECKBOX
    assert c.lookup_android_element_type("com.example.CustomView") is None
    assert c.lookup_android_element_type("android.widget.button") is None
    assert c.lookup_android_element_type("") is None


def test_ios_lookup():
    """Test exact iOS lookups hit and unknown types report not found."""
    assert c.lookup_ios_element_type("XCUIElementTypeSwitch") == "switch"
    assert c.lookup_ios_element_type("XCUIElementTypeSecureTextField") is c.ElementType.INPUT
    assert c.lookup_ios_element_type("XCUIElementTypeOther") is c.ElementType.CONTAINER
    assert c.lookup_ios_element_type("XCUIElementTypeUnknownFuture") is None


def test_tables_are_read_only():
    """Test the lookup tables cannot be mutated at runtime."""
    assert isinstance(c.ANDROID_ELEMENT_MAP, MappingProxyType)
    with pytest.raises(TypeError):
        c.ANDROID_ELEMENT_MAP["com.example.Foo"] = c.ElementType.OTHER  # type: ignore[index]
    with pytest.raises(TypeError):
        c.IOS_ELEMENT_MAP["XCUIElementTypeFoo"] = c.ElementType.OTHER  # type: ignore[index]


def test_defaults_exact_values():
    """Test default configuration values."""
    assert c.DEFAULTS["BUILD_TIMEOUT_MS"] == 1_800_000
    assert c.DEFAULTS["SHELL_TIMEOUT_MS"] == 30_000
    assert c.DEFAULTS["LOG_LIMIT"] == 100
    assert c.DEFAULTS["SCREENSHOT_QUALITY"] == 50
    assert c.DEFAULTS["DEVICE_BOOT_TIMEOUT_MS"] == 120_000
    assert set(c.DEFAULTS) == {
        "BUILD_TIMEOUT_MS",
        "SHELL_TIMEOUT_MS",
        "LOG_LIMIT",
        "SCREENSHOT_QUALITY",
        "DEVICE_BOOT_TIMEOUT_MS",
    }


def test_defaults_are_read_only():
    """Test defaults cannot be overwritten."""
    with pytest.raises(TypeError):
        c.DEFAULTS["LOG_LIMIT"] = 5  # type: ignore[index]
