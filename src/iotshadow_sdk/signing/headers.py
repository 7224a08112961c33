"""
Authentication header assembly (task 4)

Formats the signature and context into the x-amz-date and authorization
headers the caller attaches to its outbound request.
"""

from typing import Dict

from .types import (
    SigningContext,
    SIGNING_ALGORITHM,
    AMZ_DATE_HEADER,
    AUTHORIZATION_HEADER,
)


def build_authorization_header(context: SigningContext, signature: str) -> str:
    """
    Build the authorization header value.

    Args:
        context: Signing context the signature was computed from
        signature: Lowercase hex signature

    Returns:
        str: "AWS4-HMAC-SHA256 Credential=...,SignedHeaders=...,Signature=..."
    """
    return (
        f"{SIGNING_ALGORITHM} "
        f"Credential={context.access_key_id}/{context.credential_scope},"
        f"SignedHeaders={context.signed_headers},"
        f"Signature={signature}"
    )


def assemble_headers(context: SigningContext, signature: str) -> Dict[str, str]:
    """
    Assemble the headers produced by signing.

    The x-amz-date value is the one already present in the canonicalized
    headers, so the returned date and the signed date are always identical.

    Args:
        context: Signing context
        signature: Lowercase hex signature

    Returns:
        dict: Exactly x-amz-date and authorization
    """
    return {
        AMZ_DATE_HEADER: context.headers_to_sign[AMZ_DATE_HEADER],
        AUTHORIZATION_HEADER: build_authorization_header(context, signature),
    }
