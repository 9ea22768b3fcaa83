"""
Library-Wide Constants for s3mesh

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# ADDRESSING
# =============================================================================
URI_SCHEME: Final[str] = "s3://"
ARN_PARTITION: Final[str] = "aws"
ARN_SERVICE: Final[str] = "s3"

# =============================================================================
# CONTENT
# =============================================================================
DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"
DEFAULT_STORAGE_CLASS: Final[str] = "STANDARD"
STREAM_CHUNK_BYTES: Final[int] = 64 * 1024

# =============================================================================
# CACHING
# =============================================================================
DEFAULT_METADATA_TTL_SECONDS: Final[float] = 60.0

# =============================================================================
# STORE CLIENT
# =============================================================================
DEFAULT_REGION: Final[str] = "us-east-1"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_MAX_KEYS: Final[int] = 1000
CLIENT_MAX_ATTEMPTS: Final[int] = 3
