from __future__ import annotations

from typing import Optional


class ToolError(Exception):
    """Base for every error a tool handler raises on purpose.

    The dispatcher turns these into a ``Failure`` result; nothing below it
    needs to catch them.
    """

    kind = "internal"
    default_code: Optional[int] = None

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code


class InputError(ToolError):
    """Missing or malformed request parameters."""

    kind = "input"
    default_code = 400


class UpstreamError(ToolError):
    """A third-party API answered with an error or could not be reached."""

    kind = "upstream"
    default_code = 502


class ConfigError(ToolError):
    """A required credential or endpoint is not configured."""

    kind = "config"
    default_code = 500
