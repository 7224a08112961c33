"""
IoT Shadow Python SDK - Request Signing Module

AWS Signature Version 4 implementation used to authenticate requests to the
IoT Core device shadow REST API. Building a context, canonicalizing the
request, deriving the scoped key and assembling the headers are exposed
individually as well as through ``generate_auth_headers``.
"""

from .types import (
    SigningContext,
    SignatureResult,
    SigningOutcome,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    SIGNING_ALGORITHM,
    AMZ_DATE_HEADER,
    AUTHORIZATION_HEADER,
)

from .signing_context import (
    create_signing_context,
    validate_signing_context,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    build_canonical_request,
    split_canonical_request,
)

from .sigv4_signer import (
    SigV4Signer,
    create_signer,
    sign_request,
    derive_signing_key,
    generate_auth_headers,
)

from .headers import (
    assemble_headers,
    build_authorization_header,
)

from .utils import (
    sha256_hex,
    hmac_sha256,
    encode_query_value,
    generate_timestamp,
    format_amz_date,
    format_date_stamp,
    check_platform_compatibility,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'SigV4Signer',
    'create_signer',
    'sign_request',
    'derive_signing_key',
    'build_canonical_request',
    'CanonicalRequestBuilder',
    'split_canonical_request',
    'assemble_headers',
    'build_authorization_header',
    'generate_auth_headers',
    # Context
    'create_signing_context',
    'validate_signing_context',
    # Types
    'SigningContext',
    'SignatureResult',
    'SigningOutcome',
    'SigningError',
    'SigningErrorCodes',
    'HttpMethod',
    'SIGNING_ALGORITHM',
    'AMZ_DATE_HEADER',
    'AUTHORIZATION_HEADER',
    # Utilities
    'sha256_hex',
    'hmac_sha256',
    'encode_query_value',
    'generate_timestamp',
    'format_amz_date',
    'format_date_stamp',
    'check_platform_compatibility',
]
