"""
Signing context construction for Signature Version 4

All input normalization happens here: payload and URI defaults, header name
casing, lexicographic ordering of query parameters and headers, and injection
of the x-amz-date header from the captured timestamp. Later stages of the
pipeline assume a context produced by this module.
"""

import logging
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from .types import (
    SigningContext,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    RequestBody,
    AMZ_DATE_HEADER,
    HOST_HEADER,
)
from .utils import (
    normalize_header_name,
    normalize_header_value,
    normalize_timestamp,
    format_amz_date,
)

logger = logging.getLogger(__name__)

DEFAULT_CANONICAL_URI = "/"


def create_signing_context(
    access_key_id: str,
    secret_key: str,
    region: str,
    service: str,
    http_method: Union[HttpMethod, str],
    canonical_uri: Optional[str] = None,
    query_parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    payload: RequestBody = None,
    timestamp: Union[datetime, str, int, float, None] = None,
) -> SigningContext:
    """
    Create an immutable signing context for one request.

    The timestamp is captured once here; both the x-amz-date value and the
    credential scope date are rendered from it.

    Args:
        access_key_id: AWS access key identifier
        secret_key: AWS secret access key
        region: Region for the credential scope
        service: Service name for the credential scope (e.g. "iotdata")
        http_method: HTTP method (enum or case-insensitive string)
        canonical_uri: Absolute path of the request, "/" when blank
        query_parameters: Query parameters (any insertion order)
        headers: Headers to sign (any case, any insertion order); must include host
        payload: Request body, None is treated as ""
        timestamp: Fixed signing instant, defaults to now (UTC)

    Returns:
        SigningContext: Normalized, validated context

    Raises:
        SigningError: If the inputs are invalid
    """
    try:
        request_timestamp = normalize_timestamp(timestamp)

        headers_to_sign = _normalize_headers(headers)
        if AMZ_DATE_HEADER in headers_to_sign:
            logger.debug("Replacing caller supplied x-amz-date with captured signing timestamp")
        headers_to_sign[AMZ_DATE_HEADER] = format_amz_date(request_timestamp)

        context = SigningContext(
            access_key_id=access_key_id,
            secret_key=secret_key,
            region=region,
            service=service,
            http_method=_normalize_method(http_method),
            canonical_uri=_normalize_uri(canonical_uri),
            query_parameters=_sorted_mapping(_normalize_query(query_parameters)),
            headers_to_sign=_sorted_mapping(headers_to_sign),
            payload=_normalize_payload(payload),
            request_timestamp=request_timestamp,
        )

        validate_signing_context(context)
        return context

    except Exception as e:
        if isinstance(e, SigningError):
            raise

        raise SigningError(
            f"Failed to create signing context: {e}",
            SigningErrorCodes.INVALID_REQUEST,
            {"original_error": str(e)}
        )


def validate_signing_context(context: SigningContext) -> None:
    """
    Validate a signing context.

    Args:
        context: Context to validate

    Raises:
        SigningError: If the context is invalid
    """
    for field_name in ('access_key_id', 'secret_key', 'region', 'service'):
        value = getattr(context, field_name)
        if not isinstance(value, str) or not value.strip():
            raise SigningError(
                f"{field_name} cannot be empty",
                SigningErrorCodes.INVALID_CONFIG,
                {"field": field_name}
            )

    if HOST_HEADER not in context.headers_to_sign:
        raise SigningError(
            "Required header missing: host",
            SigningErrorCodes.MISSING_REQUIRED_HEADER,
            {"missing_headers": [HOST_HEADER], "request_headers": list(context.headers_to_sign.keys())}
        )

    if AMZ_DATE_HEADER not in context.headers_to_sign:
        raise SigningError(
            "Required header missing: x-amz-date",
            SigningErrorCodes.MISSING_REQUIRED_HEADER,
            {"missing_headers": [AMZ_DATE_HEADER]}
        )

    if list(context.headers_to_sign.keys()) != sorted(context.headers_to_sign.keys()):
        raise SigningError(
            "Headers to sign must be in ascending key order",
            SigningErrorCodes.INVALID_HEADERS,
            {"headers": list(context.headers_to_sign.keys())}
        )

    if list(context.query_parameters.keys()) != sorted(context.query_parameters.keys()):
        raise SigningError(
            "Query parameters must be in ascending key order",
            SigningErrorCodes.INVALID_REQUEST,
            {"query_parameters": list(context.query_parameters.keys())}
        )


def _normalize_method(http_method: Union[HttpMethod, str]) -> HttpMethod:
    if isinstance(http_method, HttpMethod):
        return http_method

    try:
        return HttpMethod(str(http_method).strip().upper())
    except ValueError:
        raise SigningError(
            f"Unsupported HTTP method: {http_method}",
            SigningErrorCodes.INVALID_METHOD,
            {"method": http_method, "supported": [m.value for m in HttpMethod]}
        )


def _normalize_uri(canonical_uri: Optional[str]) -> str:
    if canonical_uri is None or not canonical_uri.strip():
        return DEFAULT_CANONICAL_URI
    if not canonical_uri.startswith("/"):
        raise SigningError(
            f"Canonical URI must be an absolute path: {canonical_uri}",
            SigningErrorCodes.INVALID_REQUEST,
            {"canonical_uri": canonical_uri}
        )
    return canonical_uri


def _normalize_query(query_parameters: Optional[Mapping[str, str]]) -> Dict[str, str]:
    if not query_parameters:
        return {}
    return {str(key): "" if value is None else str(value) for key, value in query_parameters.items()}


def _normalize_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    normalized: Dict[str, str] = {}
    if not headers:
        return normalized

    for name, value in headers.items():
        key = normalize_header_name(name)
        if not key:
            raise SigningError(
                "Header name cannot be empty",
                SigningErrorCodes.INVALID_HEADERS,
                {"headers": list(headers.keys())}
            )
        if key in normalized:
            raise SigningError(
                f"Duplicate header after normalization: {key}",
                SigningErrorCodes.INVALID_HEADERS,
                {"header": key, "headers": list(headers.keys())}
            )
        if value is None:
            raise SigningError(
                f"Header value cannot be None: {key}",
                SigningErrorCodes.INVALID_HEADERS,
                {"header": key}
            )
        normalized[key] = normalize_header_value(value)

    return normalized


def _normalize_payload(payload: RequestBody) -> str:
    if payload is None:
        return ""

    if isinstance(payload, bytes):
        try:
            return payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SigningError(
                f"Payload bytes must be valid UTF-8: {e}",
                SigningErrorCodes.INVALID_REQUEST,
                {"original_error": str(e)}
            )

    if not isinstance(payload, str):
        raise SigningError(
            f"Payload must be string, bytes, or None, got {type(payload)}",
            SigningErrorCodes.INVALID_REQUEST,
            {"payload_type": str(type(payload))}
        )

    return payload


def _sorted_mapping(values: Dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(sorted(values.items())))
