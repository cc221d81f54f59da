"""
Shared utilities for CHAPCHAP.

Common functionality used across contexts:
- Logger setup
- Generation event log
- Timestamps
- PDF inspection
"""

from chapchap.utils.timestamp import now, now_exact, today

__all__ = ["now", "now_exact", "today"]
