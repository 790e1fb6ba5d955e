"""
pytest configuration for sticker pipeline tests.

Adds src directory to Python path for imports and exposes the payload
builders from tests_support as fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))
sys.path.insert(0, str(Path(__file__).parent))

from tests_support import (  # noqa: E402
    JPEG_BYTES,
    PNG_BYTES,
    TGS_BYTES,
    WEBM_BYTES,
    animated_webp,
    gif_bytes,
    make_response,
    static_webp,
)


@pytest.fixture
def media():
    """Namespace of payload builders for tests."""

    class Media:
        static_webp = staticmethod(static_webp)
        animated_webp = staticmethod(animated_webp)
        gif = staticmethod(gif_bytes)
        png = PNG_BYTES
        jpeg = JPEG_BYTES
        webm = WEBM_BYTES
        tgs = TGS_BYTES

    return Media


@pytest.fixture
def mock_response():
    return make_response
