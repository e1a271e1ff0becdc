from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


def safe_parse(buffer: str) -> Any:
    """Parse JSON output, returning the raw string when it is not valid JSON."""
    try:
        return json.loads(buffer)
    except (TypeError, ValueError):
        return buffer


def detect_cli_error(std_out_buffer: str) -> bool:
    """
    Return True when stdout holds the CLI's structured JSON error body.

    The CLI reports errors as an object with a non-zero integer `status` plus a
    `name` or `message`.
    """
    parsed = safe_parse(std_out_buffer)
    if not isinstance(parsed, Mapping):
        return False
    status = parsed.get("status")
    if not isinstance(status, int) or isinstance(status, bool) or status == 0:
        return False
    return bool(parsed.get("name") or parsed.get("message"))
