"""
Shared mobile-automation vocabulary (platforms, element types, log levels, ...)
with Android/iOS UI normalization, an MCP server and a CLI on top.
"""

from __future__ import annotations

__version__ = "1.0.0"
