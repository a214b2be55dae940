"""Tests for native hierarchy normalization."""
import pytest

from specter_service.models.constants import ElementType, Platform
from specter_service.models.errors import ErrorCode, SpecterToolError
from specter_service.mobile.ui_normalizer import (
    extract_interactive_elements,
    map_android_element_type,
    map_element_type,
    map_ios_element_type,
    parse_android_hierarchy,
    parse_hierarchy,
    parse_ios_hierarchy,
)


ANDROID_XML = """<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="com.example"
        content-desc="" clickable="false" enabled="true" focused="false" scrollable="false"
        password="false" visible-to-user="true" bounds="[0,0][1080,2340]">
    <node index="0" text="Welcome" resource-id="com.example:id/title" class="android.widget.TextView"
          content-desc="" clickable="false" enabled="true" focused="false" scrollable="false"
          password="false" visible-to-user="true" bounds="[40,100][1040,200]" />
    <node index="1" text="" resource-id="com.example:id/password" class="android.widget.EditText"
          content-desc="Password" clickable="true" enabled="true" focused="true" scrollable="false"
          password="true" visible-to-user="true" bounds="[40,300][1040,400]" />
    <node index="2" text="Sign in" resource-id="com.example:id/sign_in"
          class="com.google.android.material.button.MaterialButton" content-desc="" clickable="true"
          enabled="true" focused="false" scrollable="false" password="false" visible-to-user="true"
          bounds="[40,500][1040,600]" />
    <node index="3" text="" resource-id="" class="android.widget.LinearLayout" content-desc=""
          clickable="false" enabled="true" focused="false" scrollable="false" password="false"
          visible-to-user="false" bounds="[0,0][0,0]">
      <node index="0" text="Hidden" resource-id="" class="android.widget.Button" content-desc=""
            clickable="true" enabled="true" focused="false" scrollable="false" password="false"
            visible-to-user="false" bounds="[0,0][10,10]" />
    </node>
    <node index="4" text="" resource-id="" class="com.example.CustomView" content-desc="Banner"
          clickable="false" enabled="true" focused="false" scrollable="false" password="false"
          visible-to-user="true" bounds="[0,2200][1080,2340]" />
  </node>
</hierarchy>
"""

IOS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<AppiumAUT>
  <XCUIElementTypeApplication type="XCUIElementTypeApplication" name="Demo" label="Demo" enabled="true"
      visible="true" x="0" y="0" width="390" height="844">
    <XCUIElementTypeOther type="XCUIElementTypeOther" enabled="true" visible="true" x="0" y="0" width="0" height="0">
      <XCUIElementTypeButton type="XCUIElementTypeButton" name="loginButton" label="Log in" enabled="true"
          visible="true" x="20" y="700" width="350" height="44"/>
      <XCUIElementTypeSecureTextField type="XCUIElementTypeSecureTextField" name="passwordField"
          value="Password" enabled="true" visible="true" x="20" y="600" width="350" height="40"/>
      <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Welcome back" enabled="true"
          visible="true" x="20" y="100" width="350" height="30"/>
      <XCUIElementTypeSwitch type="XCUIElementTypeSwitch" name="remember" label="Remember me" value="1"
          enabled="false" visible="true" x="20" y="650" width="51" height="31"/>
      <XCUIElementTypeButton type="XCUIElementTypeButton" name="offscreen" label="Hidden" enabled="true"
          visible="false" x="20" y="900" width="100" height="44"/>
    </XCUIElementTypeOther>
  </XCUIElementTypeApplication>
</AppiumAUT>
"""


@pytest.mark.parametrize(
    "class_name,expected",
    [
        ("android.widget.Button", ElementType.BUTTON),
        ("android.widget.ImageButton", ElementType.BUTTON),
        ("com.google.android.material.floatingactionbutton.FloatingActionButton", ElementType.BUTTON),
        ("androidx.appcompat.widget.AppCompatEditText", ElementType.INPUT),
        ("com.google.android.material.textfield.TextInputEditText", ElementType.INPUT),
        ("com.google.android.material.textview.MaterialTextView", ElementType.TEXT),
        ("androidx.appcompat.widget.AppCompatImageView", ElementType.IMAGE),
        ("android.widget.GridView", ElementType.LIST),
        ("androidx.core.widget.NestedScrollView", ElementType.SCROLL),
        ("androidx.appcompat.widget.SwitchCompat", ElementType.SWITCH),
        ("androidx.constraintlayout.widget.ConstraintLayout", ElementType.CONTAINER),
        ("android.view.View", ElementType.OTHER),
        ("com.example.CustomView", ElementType.OTHER),
    ],
)
def test_map_android_element_type(class_name, expected):
    """Test table hits first, then heuristics, then 'other'."""
    assert map_android_element_type(class_name) is expected


@pytest.mark.parametrize(
    "type_name,expected",
    [
        ("XCUIElementTypeSwitch", ElementType.SWITCH),
        ("XCUIElementTypeCell", ElementType.CONTAINER),
        ("XCUIElementTypeSearchField", ElementType.OTHER),
        ("XCUIElementTypeToggle", ElementType.SWITCH),
        ("XCUIElementTypeLink", ElementType.OTHER),
        ("XCUIElementTypeImageView", ElementType.IMAGE),
        ("XCUIElementTypeUnknownFuture", ElementType.OTHER),
    ],
)
def test_map_ios_element_type(type_name, expected):
    """Test iOS classification falls back to 'other' explicitly."""
    assert map_ios_element_type(type_name) is expected


def test_map_element_type_dispatches_on_platform():
    """Test the same name classifies independently per platform."""
    assert map_element_type(Platform.ANDROID, "XCUIElementTypeButton") is ElementType.BUTTON
    assert map_element_type(Platform.IOS, "android.widget.LinearLayout") is ElementType.OTHER


def test_parse_android_hierarchy_skips_invisible_subtrees():
    """Test visible nodes are flattened in document order."""
    elements = parse_android_hierarchy(ANDROID_XML)
    assert [el.class_name for el in elements] == [
        "android.widget.FrameLayout",
        "android.widget.TextView",
        "android.widget.EditText",
        "com.google.android.material.button.MaterialButton",
        "com.example.CustomView",
    ]
    root, title, password, sign_in, custom = elements
    assert root.id == "elem_0_0"
    assert root.type is ElementType.CONTAINER
    assert title.id == "title"
    assert title.text == "Welcome"
    assert title.depth == 1
    assert password.type is ElementType.INPUT
    assert password.is_password is True
    assert password.focused is True
    assert password.content_description == "Password"
    assert sign_in.type is ElementType.BUTTON
    assert sign_in.center.x == 540
    assert sign_in.center.y == 550
    assert sign_in.index == 2
    assert custom.type is ElementType.OTHER


def test_parse_android_hierarchy_include_invisible():
    """Test zero-sized invisible containers are still dropped with their children."""
    elements = parse_android_hierarchy(ANDROID_XML, include_invisible=True)
    assert "Hidden" not in [el.text for el in elements]
    assert len(elements) == 5


def test_parse_android_hierarchy_element_type_filter_visits_children():
    """Test filtering by type keeps descendants of filtered-out nodes."""
    elements = parse_android_hierarchy(ANDROID_XML, element_types=[ElementType.BUTTON, ElementType.INPUT])
    assert [el.type for el in elements] == [ElementType.INPUT, ElementType.BUTTON]


def test_parse_android_hierarchy_max_depth():
    """Test nodes deeper than max_depth are skipped."""
    elements = parse_android_hierarchy(ANDROID_XML, max_depth=0)
    assert len(elements) == 1


def test_parse_android_hierarchy_empty_and_invalid():
    """Test empty input is empty and malformed XML is an argument error."""
    assert parse_android_hierarchy("   ") == []
    with pytest.raises(SpecterToolError) as exc:
        parse_android_hierarchy("<hierarchy><node>")
    assert exc.value.code is ErrorCode.INVALID_ARGUMENTS


def test_parse_ios_hierarchy():
    """Test XCUITest source flattening, zero-sized wrappers and hidden nodes."""
    elements = parse_ios_hierarchy(IOS_XML)
    assert [el.class_name for el in elements] == [
        "XCUIElementTypeApplication",
        "XCUIElementTypeButton",
        "XCUIElementTypeSecureTextField",
        "XCUIElementTypeStaticText",
        "XCUIElementTypeSwitch",
    ]
    app, login, password, welcome, remember = elements
    assert app.type is ElementType.OTHER
    assert login.id == "loginButton"
    assert login.clickable is True
    assert login.depth == 2
    assert password.is_password is True
    assert password.type is ElementType.INPUT
    assert password.text == "Password"
    assert welcome.type is ElementType.TEXT
    assert welcome.id.startswith("elem_2_")
    assert remember.enabled is False


def test_parse_ios_hierarchy_include_invisible():
    """Test hidden iOS elements appear when requested."""
    elements = parse_ios_hierarchy(IOS_XML, include_invisible=True)
    assert "offscreen" in [el.resource_id for el in elements]


def test_extract_interactive_elements_ios():
    """Test disabled switches and static text are not interactive."""
    elements = extract_interactive_elements(parse_ios_hierarchy(IOS_XML))
    assert [el.resource_id for el in elements] == ["loginButton", "passwordField"]


def test_parse_hierarchy_dispatch():
    """Test the platform dispatcher picks the matching parser."""
    assert len(parse_hierarchy(Platform.ANDROID, ANDROID_XML)) == 5
    assert len(parse_hierarchy(Platform.IOS, IOS_XML)) == 5
