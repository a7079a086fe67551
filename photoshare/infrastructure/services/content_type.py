"""Content type detection by magic bytes.

The upload pipeline depends only on ``ContentTypeDetector``; any object with
a compatible ``detect`` method can be swapped in.
"""
from typing import Optional, Protocol

# Bytes needed to recognise every supported signature
SNIFF_LENGTH = 16

# Image magic bytes
_SIGNATURES = [
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
]


class ContentTypeDetector(Protocol):
    def detect(self, data: bytes) -> Optional[str]:
        """Return the MIME type of ``data`` or None if unrecognised."""
        ...


class MagicBytesDetector:
    """Detects image formats from their leading signature.

    Protects against scripts or text disguised as images: the client's
    declared type and extension are never consulted.

    Examples:
        >>> MagicBytesDetector().detect(b'\\x89PNG\\r\\n\\x1a\\n....')
        'image/png'
        >>> MagicBytesDetector().detect(b'hello') is None
        True
    """

    def detect(self, data: bytes) -> Optional[str]:
        if len(data) < 4:
            return None

        for signature, mime in _SIGNATURES:
            if data[:len(signature)] == signature:
                return mime

        # WebP check (RIFF....WEBP)
        if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
            return 'image/webp'

        return None


def extension_for(content_type: str) -> str:
    """Canonical extension for a detected type."""
    return {
        'image/jpeg': '.jpg',
        'image/png': '.png',
        'image/gif': '.gif',
        'image/webp': '.webp',
    }.get(content_type, '')
