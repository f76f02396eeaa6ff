"""Process memory sampling."""

from __future__ import annotations

import resource
import sys


def memory_usage_mb() -> float:
    """Peak resident set size of this process in megabytes."""
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS and kilobytes elsewhere.
    if sys.platform == "darwin":
        return usage / 1024 / 1024
    return usage / 1024
