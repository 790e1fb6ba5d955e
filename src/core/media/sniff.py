"""
Format sniffing for downloaded sticker payloads.

Classification is by magic bytes and container structure only. A file name
or URL suffix is consulted solely for the Telegram vector format (.tgs),
which is gzip-compressed Lottie JSON with no reliable signature of its own.

Pure functions: no I/O, no shared state, never raises on malformed input.
"""

import struct
from dataclasses import dataclass

GENERIC_MIME_TYPE = "application/octet-stream"
GENERIC_EXTENSION = "bin"

RIFF_MAGIC = b"RIFF"
WEBP_MAGIC = b"WEBP"
GIF_MAGICS = (b"GIF87a", b"GIF89a")
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"
EBML_MAGIC = b"\x1a\x45\xdf\xa3"

# GIF block introducers
GIF_EXTENSION_INTRODUCER = 0x21
GIF_IMAGE_DESCRIPTOR = 0x2C
GIF_TRAILER = 0x3B

TGS_SUFFIX = ".tgs"

# Extension to MIME type for every format this module can report
EXTENSION_TO_MIME: dict[str, str] = {
    "webp": "image/webp",
    "gif": "image/gif",
    "png": "image/png",
    "jpg": "image/jpeg",
    "webm": "video/webm",
    "tgs": "application/json",
    GENERIC_EXTENSION: GENERIC_MIME_TYPE,
}


@dataclass(frozen=True)
class SniffResult:
    """Classification of a raw payload."""

    mime_type: str
    is_animated: bool
    extension: str


UNKNOWN = SniffResult(GENERIC_MIME_TYPE, False, GENERIC_EXTENSION)


def _webp_is_animated(data: bytes) -> bool:
    """
    Walk the RIFF chunk list looking for an ANIM chunk.

    The extended format places ANIM ahead of the first ANMF frame, so the
    scan stops at the first ANMF (or at a truncated chunk header).
    """
    offset = 12
    while offset + 8 <= len(data):
        fourcc = data[offset : offset + 4]
        (size,) = struct.unpack_from("<I", data, offset + 4)
        if fourcc == b"ANIM":
            return True
        if fourcc == b"ANMF":
            return False
        # Chunk payloads are padded to an even length
        offset += 8 + size + (size & 1)
    return False


def _skip_gif_sub_blocks(data: bytes, offset: int) -> int:
    """Return the offset just past a sub-block chain, or len(data) if truncated."""
    while offset < len(data):
        block_size = data[offset]
        offset += 1
        if block_size == 0:
            return offset
        offset += block_size
    return len(data)


def count_gif_frames(data: bytes) -> int:
    """
    Count image descriptor blocks in a GIF stream.

    Parses the block structure rather than searching for 0x2C bytes, since
    that value appears freely inside LZW-compressed image data.
    """
    # Header (6) + logical screen descriptor (7)
    if len(data) < 13:
        return 0

    packed = data[10]
    offset = 13
    if packed & 0x80:
        offset += 3 * (1 << ((packed & 0x07) + 1))

    frames = 0
    while offset < len(data):
        introducer = data[offset]
        if introducer == GIF_TRAILER:
            break
        if introducer == GIF_EXTENSION_INTRODUCER:
            # Introducer + label, then sub-blocks
            offset = _skip_gif_sub_blocks(data, offset + 2)
        elif introducer == GIF_IMAGE_DESCRIPTOR:
            if offset + 10 > len(data):
                break
            frames += 1
            local_packed = data[offset + 9]
            offset += 10
            if local_packed & 0x80:
                offset += 3 * (1 << ((local_packed & 0x07) + 1))
            # LZW minimum code size, then image data sub-blocks
            offset = _skip_gif_sub_blocks(data, offset + 1)
        else:
            # Unknown block, stream is corrupt past this point
            break
    return frames


def sniff(data: bytes, path_hint: str | None = None) -> SniffResult:
    """
    Classify raw bytes into (MIME type, animated flag, extension).

    Args:
        data: Raw payload
        path_hint: Optional upstream file path; only its .tgs suffix is used,
            and only when the bytes themselves are inconclusive

    Returns:
        SniffResult; unrecognized payloads map to a generic binary type
    """
    if len(data) >= 12 and data[:4] == RIFF_MAGIC and data[8:12] == WEBP_MAGIC:
        return SniffResult("image/webp", _webp_is_animated(data), "webp")

    if data[:6] in GIF_MAGICS:
        return SniffResult("image/gif", count_gif_frames(data) > 1, "gif")

    if data.startswith(PNG_MAGIC):
        return SniffResult("image/png", False, "png")

    if data.startswith(JPEG_MAGIC):
        return SniffResult("image/jpeg", False, "jpg")

    if data.startswith(EBML_MAGIC):
        # Telegram video stickers are VP9 WebM, always animated
        return SniffResult("video/webm", True, "webm")

    if path_hint and path_hint.lower().split("?")[0].endswith(TGS_SUFFIX):
        return SniffResult(EXTENSION_TO_MIME["tgs"], True, "tgs")

    return UNKNOWN


def is_animated_extension(extension: str) -> bool:
    """Whether a stored file extension can carry animation (listing statistics only)."""
    return extension.lstrip(".").lower() in {"tgs", "webm", "gif"}


__all__ = [
    "SniffResult",
    "sniff",
    "count_gif_frames",
    "is_animated_extension",
    "EXTENSION_TO_MIME",
    "GENERIC_MIME_TYPE",
    "GENERIC_EXTENSION",
]
