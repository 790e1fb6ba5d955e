"""
Media format classification.

Provides:
    - sniff: raw bytes -> SniffResult(mime_type, is_animated, extension)
    - count_gif_frames: image descriptor count for GIF streams
"""

from core.media.sniff import (
    EXTENSION_TO_MIME,
    GENERIC_EXTENSION,
    GENERIC_MIME_TYPE,
    SniffResult,
    count_gif_frames,
    is_animated_extension,
    sniff,
)

__all__ = [
    "SniffResult",
    "sniff",
    "count_gif_frames",
    "is_animated_extension",
    "EXTENSION_TO_MIME",
    "GENERIC_MIME_TYPE",
    "GENERIC_EXTENSION",
]
