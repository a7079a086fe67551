"""Application configuration and constants."""
import os
from pathlib import Path

# Directory paths
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("PHOTOSHARE_DATA_DIR", str(BASE_DIR)))

# Blob roots live outside any publicly served static directory
UPLOADS_DIR = Path(os.environ.get("PHOTOSHARE_UPLOADS_DIR", str(DATA_DIR / "uploads" / "photos")))
THUMBNAILS_DIR = Path(os.environ.get("PHOTOSHARE_THUMBNAILS_DIR", str(DATA_DIR / "uploads" / "thumbnails")))

DATABASE_PATH = Path(os.environ.get("PHOTOSHARE_DATABASE_PATH", str(DATA_DIR / "photoshare.db")))

# Upload limits
MAX_UPLOAD_SIZE = int(os.environ.get("PHOTOSHARE_MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))  # 10 MiB

# Allowed media types (detected from bytes, never from client headers)
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

# Thumbnails
THUMBNAIL_SIZE = (300, 300)
THUMBNAIL_PREFIX = "thumb_"

# Field limits
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
COMMENT_MAX_LENGTH = 2000
ALBUM_NAME_MAX_LENGTH = 100
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8

# Session configuration
SESSION_COOKIE = "photoshare_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

# Logging
LOG_LEVEL = os.environ.get("PHOTOSHARE_LOG_LEVEL", "INFO")

# First-run administrator (rotate immediately after deployment)
DEFAULT_ADMIN_USERNAME = os.environ.get("PHOTOSHARE_ADMIN_USERNAME", "admin")
DEFAULT_ADMIN_EMAIL = os.environ.get("PHOTOSHARE_ADMIN_EMAIL", "admin@photoshare.local")
DEFAULT_ADMIN_PASSWORD = os.environ.get("PHOTOSHARE_ADMIN_PASSWORD", "Admin123!")
