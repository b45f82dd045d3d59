"""
Background Processing

Off-thread coloring page preparation.
"""

from .worker import ColoringPageWorker

__all__ = [
    "ColoringPageWorker",
]
