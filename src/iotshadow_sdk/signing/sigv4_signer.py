"""
AWS Signature Version 4 signer

This module provides the signer for the IoT Core device shadow REST API. It
turns a canonical request into a string-to-sign, derives the date/region/
service scoped signing key and computes the final HMAC-SHA256 signature.
"""

import logging
from typing import Optional

from .types import (
    SigningContext,
    SignatureResult,
    SigningError,
    SigningOutcome,
    SigningErrorCodes,
    SIGNING_ALGORITHM,
    SCOPE_TERMINATOR,
    SECRET_KEY_PREFIX,
)
from .utils import (
    hmac_sha256,
    sha256_hex,
    to_hex,
    PerformanceTimer,
)
from .canonical_request import build_canonical_request
from .headers import assemble_headers, build_authorization_header

logger = logging.getLogger(__name__)

# Warn when a single signature takes longer than this
SLOW_SIGNING_THRESHOLD_MS = 10


class SigV4Signer:
    """
    AWS Signature Version 4 signer

    The signer holds no per-request state, so one instance can be shared by
    threads as long as each call receives its own SigningContext.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the signer.

        Args:
            debug: Log canonical request, string-to-sign and headers at DEBUG level
        """
        self.debug = debug

    def sign_request(self, context: SigningContext) -> SignatureResult:
        """
        Run the complete signing pipeline for a context.

        Args:
            context: Signing context for this request

        Returns:
            SignatureResult: Canonical request, string-to-sign, signature and headers

        Raises:
            SigningError: If a cryptographic primitive is unavailable
        """
        timer = PerformanceTimer()

        try:
            canonical_request = build_canonical_request(context)
            string_to_sign = self.build_string_to_sign(canonical_request, context)
            signature = self._calculate_signature(string_to_sign, context)
            headers = assemble_headers(context, signature)

            result = SignatureResult(
                canonical_request=canonical_request,
                string_to_sign=string_to_sign,
                signature=signature,
                authorization=build_authorization_header(context, signature),
                headers=headers,
            )

            if self.debug:
                logger.debug(f"Canonical request:\n{canonical_request}")
                logger.debug(f"String to sign:\n{string_to_sign}")
                logger.debug(f"Signature: {signature}")
                for name, value in result.headers.items():
                    logger.debug(f"Header {name} = {value}")

            elapsed_ms = timer.elapsed_ms()
            if elapsed_ms > SLOW_SIGNING_THRESHOLD_MS:
                logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{SLOW_SIGNING_THRESHOLD_MS}ms)")
            else:
                logger.debug(f"Signed {context.http_method.value} {context.canonical_uri} in {elapsed_ms:.2f}ms")

            return result

        except Exception as e:
            if isinstance(e, SigningError):
                raise

            raise SigningError(
                f"Request signing failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            )

    def sign(self, canonical_request: str, context: SigningContext) -> str:
        """
        Compute the signature of a canonical request.

        Args:
            canonical_request: Canonical request built from the same context
            context: Signing context

        Returns:
            str: Lowercase hex signature

        Raises:
            SigningError: If a cryptographic primitive is unavailable
        """
        string_to_sign = self.build_string_to_sign(canonical_request, context)
        return self._calculate_signature(string_to_sign, context)

    def build_string_to_sign(self, canonical_request: str, context: SigningContext) -> str:
        """
        Build the string-to-sign (task 2).

        Args:
            canonical_request: Canonical request string
            context: Signing context

        Returns:
            str: Algorithm, timestamp, credential scope and canonical request
                 hash joined by newlines
        """
        return '\n'.join([
            SIGNING_ALGORITHM,
            context.amz_date,
            context.credential_scope,
            sha256_hex(canonical_request),
        ])

    def _calculate_signature(self, string_to_sign: str, context: SigningContext) -> str:
        # task 3
        signing_key = derive_signing_key(
            context.secret_key,
            context.date_stamp,
            context.region,
            context.service,
        )
        return to_hex(hmac_sha256(signing_key, string_to_sign))


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """
    Derive the scoped signing key.

    kDate = HMAC("AWS4" + secret, date), then region, service and
    "aws4_request" are folded in turn. The date must be the YYYYMMDD value,
    not the full timestamp.

    Args:
        secret_key: AWS secret access key
        date_stamp: Date in YYYYMMDD form
        region: Region name
        service: Service name

    Returns:
        bytes: 32 byte signing key

    Raises:
        SigningError: If HMAC-SHA256 is unavailable
    """
    k_date = hmac_sha256(f"{SECRET_KEY_PREFIX}{secret_key}".encode('utf-8'), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, SCOPE_TERMINATOR)


def create_signer(debug: bool = False) -> SigV4Signer:
    """
    Create a new Signature Version 4 signer.

    Args:
        debug: Enable debug logging of intermediate values

    Returns:
        SigV4Signer: Signer instance
    """
    return SigV4Signer(debug=debug)


def sign_request(context: SigningContext, signer: Optional[SigV4Signer] = None) -> SignatureResult:
    """
    Sign a request context.

    Args:
        context: Signing context
        signer: Optional signer, a default one is created when omitted

    Returns:
        SignatureResult: Signing result
    """
    return (signer or create_signer()).sign_request(context)


def generate_auth_headers(context: SigningContext, signer: Optional[SigV4Signer] = None) -> SigningOutcome:
    """
    Sign a context and report the result explicitly.

    Signing failures are logged and returned as a failed outcome with no
    headers at all; callers must check ``outcome.ok`` and abort the request
    when it is false.

    Args:
        context: Signing context
        signer: Optional signer, a default one is created when omitted

    Returns:
        SigningOutcome: Headers on success, error and empty headers on failure
    """
    signer = signer or create_signer()

    try:
        result = signer.sign_request(context)
    except SigningError as e:
        logger.error(f"Request signing failed, no headers produced: {e}")
        return SigningOutcome.failure(e)

    return SigningOutcome.success(result)
