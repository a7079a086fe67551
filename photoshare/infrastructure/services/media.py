"""Media processing services (thumbnails, image handling)."""
from io import BytesIO

from PIL import Image, ImageOps

# Pillow format names for the allowed detected types
PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


def create_thumbnail_bytes(
    image_data: bytes,
    content_type: str,
    size: tuple[int, int] = (300, 300)
) -> tuple[bytes, int, int]:
    """Create thumbnail from image bytes, return (bytes, width, height).

    The thumbnail keeps the source format and fits inside ``size`` with the
    aspect ratio preserved.

    Raises:
        Whatever Pillow raises for unreadable or unsupported data.
    """
    fmt = PIL_FORMATS.get(content_type)
    if fmt is None:
        raise ValueError(f"Unsupported content type for thumbnail: {content_type}")

    with Image.open(BytesIO(image_data)) as img:
        # Apply EXIF orientation to fix rotated images from cameras/phones
        img = ImageOps.exif_transpose(img)
        img.thumbnail(size, Image.Resampling.LANCZOS)
        # Convert RGBA/P to RGB for JPEG (no transparency support)
        if fmt == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        thumb_width, thumb_height = img.size
        output = BytesIO()
        if fmt == "JPEG":
            img.save(output, fmt, quality=85)
        else:
            img.save(output, fmt)
        return output.getvalue(), thumb_width, thumb_height
