"""
Platform-conditional template lines.

A line prefixed with ``#WIN`` or ``#MAC`` is only active on that platform. On
the matching platform the marker is removed and the rest of the line is used
as-is; everywhere else the line disappears.
"""

import re
import sys
from typing import Optional, Tuple

WINDOWS = "WIN"
MACOS = "MAC"
# Passed instead of a marker name to use the running platform
AUTO = "auto"

_MARKER_RE = re.compile(r"^(\s*)#(WIN|MAC)(?: |(?=\s)|$)")


def current_platform() -> Optional[str]:
    """Return the marker name for the running platform, or None on anything else."""
    if sys.platform.startswith("win"):
        return WINDOWS
    if sys.platform == "darwin":
        return MACOS
    return None


def resolve(platform: Optional[str]) -> Optional[str]:
    return current_platform() if platform == AUTO else platform


def unwrap_line(line: str, platform: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Resolve a single line against the platform.

    Returns ``(line, marker)``. ``marker`` is the platform the line was
    conditional on (None for ordinary lines) and ``line`` is None when the
    line must be dropped.
    """
    match = _MARKER_RE.match(line)
    if not match:
        return line, None

    marker = match.group(2)
    if marker != platform:
        return None, marker

    # Keep the indentation so YAML nesting survives the unwrap
    return match.group(1) + line[match.end():], marker


def filter_text(text: str, platform: Optional[str]) -> str:
    """Apply unwrap_line to every line of a text blob."""
    kept = []
    for line in text.splitlines(keepends=True):
        resolved, _ = unwrap_line(line, platform)
        if resolved is not None:
            kept.append(resolved)
    return "".join(kept)
