from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
    DEVICE_NOT_RUNNING = "DEVICE_NOT_RUNNING"
    BUILD_FAILED = "BUILD_FAILED"
    BUILD_TIMEOUT = "BUILD_TIMEOUT"
    TEST_EXECUTION_FAILED = "TEST_EXECUTION_FAILED"
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    MAESTRO_NOT_INSTALLED = "MAESTRO_NOT_INSTALLED"
    DSYM_NOT_FOUND = "DSYM_NOT_FOUND"
    NO_CRASH_LOGS = "NO_CRASH_LOGS"
    PLATFORM_UNAVAILABLE = "PLATFORM_UNAVAILABLE"
    TOOL_BUSY = "TOOL_BUSY"
    SHELL_EXECUTION_FAILED = "SHELL_EXECUTION_FAILED"
    TIMEOUT = "TIMEOUT"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SpecterToolError(RuntimeError):
    """
    Error raised by tools, with a stable code and an optional hint for the caller.
    """

    def __init__(
        self,
        *,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            out["details"] = self.details
        if self.suggestion is not None:
            out["suggestion"] = self.suggestion
        return out


def _seconds(timeout_ms: float) -> str:
    return f"{timeout_ms / 1000:g}s"


def device_not_found(device_name: str, available_devices: list[str]) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.DEVICE_NOT_FOUND,
        message=f"Device '{device_name}' not found",
        details={"deviceName": device_name, "availableDevices": list(available_devices)},
        suggestion=f"Available devices: {', '.join(available_devices)}",
    )


def device_not_running(device_name: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.DEVICE_NOT_RUNNING,
        message=f"Device '{device_name}' is not running",
        suggestion='Boot the device first using manage_env with action: "boot"',
    )


def build_failed(platform: str, error_summary: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.BUILD_FAILED,
        message=f"Build failed for {platform}",
        details={"platform": platform, "errorSummary": error_summary},
    )


def build_timeout(platform: str, timeout_ms: float) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.BUILD_TIMEOUT,
        message=f"Build timed out after {_seconds(timeout_ms)} for {platform}",
        suggestion="Try running with clean: true or check for network issues",
    )


def element_not_found(element_id: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.ELEMENT_NOT_FOUND,
        message=f"Element '{element_id}' not found in UI hierarchy",
        suggestion="Use get_ui_context to see available elements",
    )


def maestro_not_installed() -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.MAESTRO_NOT_INSTALLED,
        message="Maestro CLI is not installed or not in PATH",
        suggestion="Install Maestro: brew install maestro (macOS) or see https://maestro.mobile.dev",
    )


def dsym_not_found(bundle_id: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.DSYM_NOT_FOUND,
        message=f"dSYM file not found for {bundle_id}",
        suggestion="Build the app first to generate dSYM files",
    )


def no_crash_logs(bundle_id: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.NO_CRASH_LOGS,
        message=f"No crash logs found for {bundle_id}",
    )


def platform_unavailable(platform: str) -> SpecterToolError:
    if platform == "ios":
        suggestion = "iOS tools require macOS with Xcode installed"
    else:
        suggestion = "Ensure Android SDK is installed"
    return SpecterToolError(
        code=ErrorCode.PLATFORM_UNAVAILABLE,
        message=f"Platform '{platform}' tools are not available on this system",
        suggestion=suggestion,
    )


def tool_busy() -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.TOOL_BUSY,
        message="Another tool is currently executing. Requests are queued sequentially.",
    )


def shell_execution_failed(command: str, stderr: str) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.SHELL_EXECUTION_FAILED,
        message="Shell command execution failed",
        details={"command": command, "stderr": stderr},
    )


def timeout(operation: str, timeout_ms: float) -> SpecterToolError:
    return SpecterToolError(
        code=ErrorCode.TIMEOUT,
        message=f"Operation '{operation}' timed out after {_seconds(timeout_ms)}",
    )


def invalid_arguments(message: str) -> SpecterToolError:
    return SpecterToolError(code=ErrorCode.INVALID_ARGUMENTS, message=message)
