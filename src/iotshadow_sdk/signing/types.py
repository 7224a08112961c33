"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the AWS Signature
Version 4 request signing pipeline used against the IoT Core device shadow API.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union, Any
from dataclasses import dataclass, field
from enum import Enum


# Algorithm identifier used in the string-to-sign and the authorization header
SIGNING_ALGORITHM = "AWS4-HMAC-SHA256"

# Terminal component of every credential scope
SCOPE_TERMINATOR = "aws4_request"

# Prefix prepended to the secret key before the first derivation step
SECRET_KEY_PREFIX = "AWS4"

# Header names produced by signing
AMZ_DATE_HEADER = "x-amz-date"
AUTHORIZATION_HEADER = "authorization"
HOST_HEADER = "host"

# Timestamp formats, both rendered from the same captured instant
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class SigningContext:
    """
    Immutable inputs for one signing operation

    Instances are produced by ``create_signing_context`` which normalizes every
    field, so downstream stages never re-apply defaults. A context is bound to
    the instant captured in ``request_timestamp`` and must not be reused for
    another request.

    Attributes:
        access_key_id: AWS access key identifier
        secret_key: AWS secret access key
        region: Region used in the credential scope (e.g. us-east-1)
        service: Service used in the credential scope (e.g. iotdata)
        http_method: HTTP method of the request
        canonical_uri: Absolute path of the target URI, "/" when blank
        query_parameters: Query parameters in ascending key order
        headers_to_sign: Lowercase headers in ascending key order, including
            host and x-amz-date
        payload: Request body, "" when absent
        request_timestamp: UTC instant captured at construction
    """
    access_key_id: str
    secret_key: str = field(repr=False)
    region: str
    service: str
    http_method: HttpMethod
    canonical_uri: str
    query_parameters: Mapping[str, str]
    headers_to_sign: Mapping[str, str]
    payload: str
    request_timestamp: datetime

    @property
    def amz_date(self) -> str:
        """Full timestamp in YYYYMMDDTHHMMSSZ form."""
        return self.request_timestamp.strftime(AMZ_DATE_FORMAT)

    @property
    def date_stamp(self) -> str:
        """Date-only value in YYYYMMDD form."""
        return self.request_timestamp.strftime(DATE_STAMP_FORMAT)

    @property
    def credential_scope(self) -> str:
        return f"{self.date_stamp}/{self.region}/{self.service}/{SCOPE_TERMINATOR}"

    @property
    def signed_headers(self) -> str:
        return ";".join(self.headers_to_sign.keys())


@dataclass(frozen=True)
class SignatureResult:
    """
    Computed output of one signing run

    Attributes:
        canonical_request: Canonical request string that was hashed
        string_to_sign: String-to-sign that was HMAC'd with the signing key
        signature: Lowercase hex signature
        authorization: Value of the authorization header
        headers: Headers the caller must attach (x-amz-date, authorization)
    """
    canonical_request: str
    string_to_sign: str
    signature: str
    authorization: str
    headers: Mapping[str, str]

    def __post_init__(self):
        """Validate signature result"""
        if not self.signature:
            raise ValueError("Signature cannot be empty")

        if set(self.headers) != {AMZ_DATE_HEADER, AUTHORIZATION_HEADER}:
            raise ValueError("Headers must contain exactly x-amz-date and authorization")

        object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class SigningOutcome:
    """
    Explicit success or failure of header generation

    On failure ``headers`` is empty and ``error`` describes why, so callers
    cannot mistake a failed signing attempt for a request with no headers.
    """
    headers: Mapping[str, str] = field(default_factory=dict)
    error: Optional['SigningError'] = None
    result: Optional[SignatureResult] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.headers)

    @classmethod
    def success(cls, result: SignatureResult) -> 'SigningOutcome':
        return cls(headers=result.headers, result=result)

    @classmethod
    def failure(cls, error: 'SigningError') -> 'SigningOutcome':
        return cls(headers=MappingProxyType({}), error=error)


class SigningError(Exception):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


# Common signing error codes
class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"

    # Request errors
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_HEADERS = "INVALID_HEADERS"
    MISSING_REQUIRED_HEADER = "MISSING_REQUIRED_HEADER"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"

    # Crypto errors
    CRYPTOGRAPHY_UNAVAILABLE = "CRYPTOGRAPHY_UNAVAILABLE"


# Accepted request body types
RequestBody = Union[str, bytes, None]
