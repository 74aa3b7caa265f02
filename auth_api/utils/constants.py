"""Application-wide constants."""

# API Configuration
API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# Avatar uploads
MAX_AVATAR_SIZE_MB = 5
MAX_AVATAR_SIZE_BYTES = MAX_AVATAR_SIZE_MB * 1024 * 1024  # 5MB

ALLOWED_IMAGE_TYPES = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
]

# Profile limits
MIN_NAME_LENGTH = 2
MAX_BIO_LENGTH = 500

# Logged request bodies are cut to this many characters
MAX_LOGGED_BODY_CHARS = 1000
