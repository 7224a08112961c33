"""
Device shadow state publisher

Publishes desired-state updates to the IoT Core device shadow REST API
(POST /things/{deviceRef}/shadow?name={shadowName}) with Signature Version 4
authentication headers. Retries and connection pooling policy are left to the
caller's requests session.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

# HTTP client imports with fallback
try:
    import requests
    REQUESTS_AVAILABLE = True
except ImportError:
    REQUESTS_AVAILABLE = False
    requests = None

from ..config import IotShadowConfig, is_valid_thing_name
from ..exceptions import ServerCommunicationError, UnsupportedPlatformError, ValidationError
from ..signing import (
    HttpMethod,
    SigningError,
    SigningErrorCodes,
    SigningOutcome,
    SigV4Signer,
    create_signing_context,
    encode_query_value,
    generate_auth_headers,
)
from ..signing.types import HOST_HEADER, AMZ_DATE_HEADER, AUTHORIZATION_HEADER

logger = logging.getLogger(__name__)

SHADOW_NAME_PARAMETER = "name"


def shadow_uri(device_ref: str) -> str:
    """Canonical URI of a device's shadow resource."""
    return f"/things/{device_ref}/shadow"


def build_desired_state(attributes: Mapping[str, Any]) -> str:
    """
    Build a desired-state shadow document.

    Args:
        attributes: Desired attribute values

    Returns:
        str: Compact JSON {"state":{"desired":{...}}}
    """
    return json.dumps({"state": {"desired": dict(attributes)}}, separators=(',', ':'))


class StatePublisher:
    """
    Publishes device shadow updates with signed requests.

    Every call builds a fresh signing context, so the publisher can be shared
    between threads as long as the underlying requests session is.
    """

    def __init__(
        self,
        config: IotShadowConfig,
        session: Optional['requests.Session'] = None,
        signer: Optional[SigV4Signer] = None,
    ):
        """
        Initialize the publisher.

        Args:
            config: Endpoint, credentials and target shadow
            session: Optional requests session to send through
            signer: Optional signer (e.g. with debug logging enabled)

        Raises:
            UnsupportedPlatformError: If requests library is not available
        """
        if not REQUESTS_AVAILABLE:
            raise UnsupportedPlatformError(
                "State publisher requires 'requests' package. Install with: pip install requests",
                "REQUESTS_UNAVAILABLE"
            )

        self.config = config
        self.session = session or requests.Session()
        self.signer = signer or SigV4Signer()

        logger.info(f"Initialized state publisher for endpoint: {config.publisher.endpoint}")

    def get_headers(
        self,
        http_method: Union[HttpMethod, str],
        device_ref: str,
        payload: Optional[str],
        timestamp=None,
    ) -> SigningOutcome:
        """
        Sign a shadow request and return its authentication headers.

        Args:
            http_method: HTTP method of the request
            device_ref: Device (thing) name
            payload: Request body
            timestamp: Optional fixed signing instant

        Returns:
            SigningOutcome: x-amz-date and authorization on success

        Raises:
            ValidationError: If device_ref is not a valid thing name
        """
        if not is_valid_thing_name(device_ref):
            raise ValidationError(
                f"Invalid device ref: {device_ref!r}",
                "INVALID_DEVICE_REF",
                {"device_ref": device_ref}
            )

        publisher = self.config.publisher
        context = create_signing_context(
            access_key_id=publisher.aws_access_key_id,
            secret_key=publisher.aws_secret_key,
            region=publisher.region,
            service=publisher.service,
            http_method=http_method,
            canonical_uri=shadow_uri(device_ref),
            query_parameters={SHADOW_NAME_PARAMETER: self.config.shadow.device_shadow},
            headers={HOST_HEADER: publisher.endpoint},
            payload=payload,
            timestamp=timestamp,
        )
        return generate_auth_headers(context, self.signer)

    def publish_device_shadow_update(self, payload: str, device_ref: Optional[str] = None) -> Dict[str, Any]:
        """
        Publish a shadow update document.

        Args:
            payload: Shadow document (JSON string), sent exactly as signed
            device_ref: Device name, defaults to the configured device

        Returns:
            dict: Parsed response document

        Raises:
            ValidationError: If device_ref is not a valid thing name
            SigningError: If signing failed; no request is sent
            ServerCommunicationError: On HTTP or network errors
        """
        device_ref = device_ref or self.config.shadow.device_ref
        outcome = self.get_headers(HttpMethod.POST, device_ref, payload)
        logger.debug(f"Signing outcome ok={outcome.ok} headers={sorted(outcome.headers)}")

        if not outcome.ok:
            logger.error("Signing failed, shadow update not sent")
            raise outcome.error or SigningError("Signing produced no headers", SigningErrorCodes.SIGNING_FAILED)

        url = self._build_url(device_ref)
        headers = {
            AMZ_DATE_HEADER: outcome.headers[AMZ_DATE_HEADER],
            AUTHORIZATION_HEADER: outcome.headers[AUTHORIZATION_HEADER],
            'content-type': 'application/json',
            'accept': 'application/json',
        }

        response_data = self._make_request('POST', url, headers=headers, data=(payload or '').encode('utf-8'))
        logger.info(f"Published update to shadow '{self.config.shadow.device_shadow}' of {device_ref}")
        return response_data

    def publish_desired_state(self, attributes: Mapping[str, Any], device_ref: Optional[str] = None) -> Dict[str, Any]:
        """Publish desired attribute values to the device shadow."""
        return self.publish_device_shadow_update(build_desired_state(attributes), device_ref)

    def _build_url(self, device_ref: str) -> str:
        # encoded the same way as the canonical query string
        shadow_name = encode_query_value(self.config.shadow.device_shadow)
        return f"{self.config.publisher.base_url}{shadow_uri(device_ref)}?{SHADOW_NAME_PARAMETER}={shadow_name}"

    def _make_request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Make HTTP request with error handling.

        Args:
            method: HTTP method
            url: Full request URL
            **kwargs: Additional arguments for requests

        Returns:
            dict: Response JSON data

        Raises:
            ServerCommunicationError: On HTTP or network errors
        """
        kwargs.setdefault('timeout', self.config.publisher.timeout)
        kwargs.setdefault('verify', self.config.publisher.verify_ssl)

        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            raise ServerCommunicationError(f"Request timeout after {self.config.publisher.timeout} seconds")
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}")
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}")

        if not response.ok:
            try:
                error_data = response.json()
                message = error_data.get('message', f'HTTP {response.status_code}: {response.reason}')
            except (ValueError, AttributeError):
                message = f'HTTP {response.status_code}: {response.reason}'

            raise ServerCommunicationError(
                f"Shadow update failed: {message}",
                error_code="HTTP_ERROR",
                http_status=response.status_code,
                details={'status_code': response.status_code}
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ServerCommunicationError(f"Invalid JSON response: {e}")

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()
