"""
Utility functions for request signing

This module provides the hashing and keyed-hash primitives, timestamp handling,
query/header value encoding and platform checks used by the Signature Version 4
signing pipeline.
"""

import sys
import time
import platform
from datetime import datetime, timezone
from typing import Dict, Any, Union
from urllib.parse import quote

# Import cryptography components
try:
    from cryptography.hazmat.primitives import hashes, hmac
    from cryptography.exceptions import UnsupportedAlgorithm
    CRYPTOGRAPHY_AVAILABLE = True
except ImportError:
    CRYPTOGRAPHY_AVAILABLE = False
    hashes = None
    hmac = None
    UnsupportedAlgorithm = None

from .types import (
    SigningError,
    SigningErrorCodes,
    AMZ_DATE_FORMAT,
    DATE_STAMP_FORMAT,
)

# RFC 3986 unreserved characters beyond alphanumerics
UNRESERVED_CHARACTERS = "-_.~"


def _require_cryptography(operation: str) -> None:
    if not CRYPTOGRAPHY_AVAILABLE:
        raise SigningError(
            f"Cryptography package not available for {operation}",
            SigningErrorCodes.CRYPTOGRAPHY_UNAVAILABLE,
            {"operation": operation}
        )


def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return data.encode('utf-8')
    return data


def sha256_hex(data: Union[str, bytes]) -> str:
    """
    Calculate the lowercase hex SHA-256 digest of data.

    Args:
        data: String (UTF-8 encoded before hashing) or bytes

    Returns:
        str: 64 character lowercase hex digest

    Raises:
        SigningError: If the SHA-256 primitive is unavailable
    """
    _require_cryptography("sha256")

    try:
        digest = hashes.Hash(hashes.SHA256())
        digest.update(_to_bytes(data))
        return to_hex(digest.finalize())
    except UnsupportedAlgorithm as e:
        raise SigningError(
            f"SHA-256 not supported by cryptography backend: {e}",
            SigningErrorCodes.CRYPTOGRAPHY_UNAVAILABLE,
            {"operation": "sha256", "original_error": str(e)}
        )


def hmac_sha256(key: bytes, data: Union[str, bytes]) -> bytes:
    """
    Apply HMAC-SHA256 on data using the given key.

    Args:
        key: Raw key bytes
        data: Message (string is UTF-8 encoded)

    Returns:
        bytes: 32 byte MAC

    Raises:
        SigningError: If the HMAC-SHA256 primitive is unavailable
    """
    _require_cryptography("hmac-sha256")

    try:
        mac = hmac.HMAC(key, hashes.SHA256())
        mac.update(_to_bytes(data))
        return mac.finalize()
    except UnsupportedAlgorithm as e:
        raise SigningError(
            f"HMAC-SHA256 not supported by cryptography backend: {e}",
            SigningErrorCodes.CRYPTOGRAPHY_UNAVAILABLE,
            {"operation": "hmac-sha256", "original_error": str(e)}
        )


def check_platform_compatibility() -> Dict[str, Any]:
    """
    Check platform compatibility for signing operations.

    Returns:
        dict: Compatibility information including cryptography availability,
              SHA-256/HMAC support and platform details
    """
    compatibility = {
        'cryptography_available': CRYPTOGRAPHY_AVAILABLE,
        'hmac_sha256_supported': False,
        'platform_info': {
            'system': platform.system(),
            'python_version': sys.version,
            'architecture': platform.architecture()[0],
        }
    }

    if CRYPTOGRAPHY_AVAILABLE:
        try:
            hmac_sha256(b"key", sha256_hex(""))
            compatibility['hmac_sha256_supported'] = True
        except SigningError:
            compatibility['hmac_sha256_supported'] = False

    return compatibility


def generate_timestamp() -> datetime:
    """
    Capture the current instant in UTC.

    Returns:
        datetime: Timezone-aware UTC datetime truncated to whole seconds
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def normalize_timestamp(value: Union[datetime, str, int, float, None]) -> datetime:
    """
    Normalize a timestamp to a timezone-aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC), Unix timestamps and
    strings in the x-amz-date format. None captures the current instant.

    Args:
        value: Timestamp to normalize

    Returns:
        datetime: UTC datetime

    Raises:
        SigningError: If the value cannot be interpreted
    """
    if value is None:
        return generate_timestamp()

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        raise SigningError(
            f"Invalid timestamp: {value!r}",
            SigningErrorCodes.INVALID_TIMESTAMP,
            {"timestamp": value}
        )

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    if isinstance(value, str):
        try:
            return datetime.strptime(value, AMZ_DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError as e:
            raise SigningError(
                f"Invalid timestamp format: {value}",
                SigningErrorCodes.INVALID_TIMESTAMP,
                {"timestamp": value, "expected_format": AMZ_DATE_FORMAT, "original_error": str(e)}
            )

    raise SigningError(
        f"Invalid timestamp type: {type(value)}",
        SigningErrorCodes.INVALID_TIMESTAMP,
        {"timestamp_type": str(type(value))}
    )


def format_amz_date(timestamp: datetime) -> str:
    """Format a UTC datetime as YYYYMMDDTHHMMSSZ."""
    return timestamp.strftime(AMZ_DATE_FORMAT)


def format_date_stamp(timestamp: datetime) -> str:
    """Format a UTC datetime as YYYYMMDD."""
    return timestamp.strftime(DATE_STAMP_FORMAT)


def encode_query_value(value: str) -> str:
    """
    Percent-encode a query parameter value for the canonical query string.

    Unreserved characters (A-Z, a-z, 0-9, '-', '_', '.', '~') are left as is,
    everything else is UTF-8 percent-encoded with uppercase hex. Spaces become
    %20.

    Args:
        value: Raw parameter value

    Returns:
        str: Encoded value
    """
    return quote(value, safe=UNRESERVED_CHARACTERS)


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def normalize_header_value(value: str) -> str:
    """Trim surrounding whitespace from a header value."""
    return str(value).strip()


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000


def to_hex(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.

    Args:
        data: Bytes to convert

    Returns:
        str: Lowercase hex string
    """
    return data.hex().lower()
