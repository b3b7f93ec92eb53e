"""
Utility functions for mindgraph.

This module contains low-level helpers used across the system.
No domain logic should live here.
"""

from mindgraph.utils.time import now_ms

__all__ = [
    "now_ms",
]
