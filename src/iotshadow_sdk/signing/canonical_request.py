"""
Canonical request construction for AWS Signature Version 4

The canonical request always has six newline separated segments: method,
URI, query string, canonical headers, signed headers and payload hash. Empty
query parameters or headers leave their segment empty rather than dropping it,
so the server side recomputation sees the same structure.
"""

from typing import List

from .types import (
    SigningContext,
    SigningError,
    SigningErrorCodes,
)
from .utils import (
    encode_query_value,
    sha256_hex,
)

CANONICAL_REQUEST_SEGMENTS = 6


class CanonicalRequestBuilder:
    """
    Canonical request builder for Signature Version 4 (task 1)
    """

    def __init__(self, context: SigningContext):
        """
        Initialize canonical request builder.

        Args:
            context: Normalized signing context
        """
        self.context = context

    def build(self) -> str:
        """
        Build the canonical request string.

        Returns:
            str: Canonical request

        Raises:
            SigningError: If the payload hash cannot be computed
        """
        try:
            segments = [
                self._build_method(),
                self.context.canonical_uri,
                self.build_canonical_query_string(),
                self.build_canonical_headers(),
                self.build_signed_headers(),
                self.build_payload_hash(),
            ]
            return '\n'.join(segments)

        except Exception as e:
            if isinstance(e, SigningError):
                raise

            raise SigningError(
                f"Canonical request construction failed: {e}",
                SigningErrorCodes.INVALID_REQUEST,
                {"original_error": str(e)}
            )

    def _build_method(self) -> str:
        return self.context.http_method.value

    def build_canonical_query_string(self) -> str:
        """
        Build the canonical query string.

        Returns:
            str: key=encoded(value) pairs joined with '&' in ascending key
                 order, or an empty string when there are no parameters
        """
        pairs = [
            f"{key}={encode_query_value(value)}"
            for key, value in self.context.query_parameters.items()
        ]
        return '&'.join(pairs)

    def build_canonical_headers(self) -> str:
        """
        Build the canonical headers block.

        Each header contributes a "name:value\\n" line, so the block ends with
        a newline and the join in ``build`` yields the blank separator line.

        Returns:
            str: Canonical headers block
        """
        return ''.join(
            f"{name}:{value}\n"
            for name, value in self.context.headers_to_sign.items()
        )

    def build_signed_headers(self) -> str:
        return self.context.signed_headers

    def build_payload_hash(self) -> str:
        """
        Hash the request payload.

        Returns:
            str: Lowercase hex SHA-256 of the UTF-8 payload
        """
        return sha256_hex(self.context.payload)


def build_canonical_request(context: SigningContext) -> str:
    """
    Build canonical request for signing.

    Args:
        context: Signing context

    Returns:
        str: Canonical request string

    Raises:
        SigningError: If construction fails
    """
    builder = CanonicalRequestBuilder(context)
    return builder.build()


def split_canonical_request(canonical_request: str) -> List[str]:
    """
    Split a canonical request back into its six segments.

    The canonical headers segment is returned with its trailing newline.

    Args:
        canonical_request: Canonical request string

    Returns:
        list: Method, URI, query string, canonical headers, signed headers,
              payload hash

    Raises:
        SigningError: If the string does not have the expected structure
    """
    lines = canonical_request.split('\n')
    if len(lines) < CANONICAL_REQUEST_SEGMENTS:
        raise SigningError(
            "Canonical request has too few segments",
            SigningErrorCodes.INVALID_REQUEST,
            {"segments": len(lines)}
        )

    method, uri, query = lines[0], lines[1], lines[2]
    signed_headers, payload_hash = lines[-2], lines[-1]
    header_lines = lines[3:-2]

    # header lines end with the blank separator produced by the trailing newline
    if header_lines and header_lines[-1] == '':
        header_lines = header_lines[:-1]
    canonical_headers = ''.join(f"{line}\n" for line in header_lines)

    return [method, uri, query, canonical_headers, signed_headers, payload_hash]
