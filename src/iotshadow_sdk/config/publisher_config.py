"""
Publisher configuration for the IoT Shadow Python SDK

Loads the IoT Core endpoint, signing credentials and target device shadow from
a JSON document, a file or environment variables. The JSON layout mirrors the
``aws.iot.*`` and ``iot.device.*`` property keys used by the device service:

    {
        "aws": {"iot": {"endpoint": "...", "region": "...",
                        "aws-access-key-id": "...", "aws-secret-key": "..."}},
        "iot": {"device": {"device-ref": "...", "device-shadow": "..."}}
    }

When no secret key is supplied it is looked up in the OS keyring under the
``iotshadow-sdk`` service, keyed by access key id.
"""

import os
import re
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

# Keyring import for OS keychain
try:
    import keyring
    from keyring.errors import KeyringError
    KEYRING_AVAILABLE = True
except ImportError:
    KEYRING_AVAILABLE = False
    keyring = None
    KeyringError = Exception

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

KEYRING_SERVICE_NAME = "iotshadow-sdk"
DEFAULT_SERVICE_NAME = "iotdata"
DEFAULT_TIMEOUT = 30.0

# AWS IoT thing names: letters, digits, colon, underscore and hyphen
THING_NAME_PATTERN = re.compile(r"^[A-Za-z0-9:_-]{1,128}$")

# Environment variable names
ENV_ENDPOINT = "AWS_IOT_ENDPOINT"
ENV_REGION = "AWS_IOT_REGION"
ENV_ACCESS_KEY_ID = "AWS_IOT_ACCESS_KEY_ID"
ENV_SECRET_KEY = "AWS_IOT_SECRET_KEY"
ENV_DEVICE_REF = "IOT_DEVICE_REF"
ENV_DEVICE_SHADOW = "IOT_DEVICE_SHADOW"


@dataclass
class PublisherConfig:
    """
    Connection and signing settings for the device shadow REST API

    Attributes:
        endpoint: IoT data endpoint host (scheme and trailing slash are stripped)
        region: AWS region of the endpoint
        aws_access_key_id: Access key id used in the credential scope
        aws_secret_key: Secret key used to derive the signing key
        service: Service name in the credential scope
        timeout: Request timeout in seconds
        verify_ssl: Verify the endpoint's TLS certificate
    """
    endpoint: str
    region: str
    aws_access_key_id: str
    aws_secret_key: str = field(repr=False)
    service: str = DEFAULT_SERVICE_NAME
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self):
        """Validate publisher configuration."""
        for name in ('endpoint', 'region', 'aws_access_key_id', 'aws_secret_key', 'service'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{name} cannot be empty", "MISSING_VALUE", {"field": name})

        self.endpoint = _normalize_endpoint(self.endpoint)

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", "INVALID_VALUE", {"field": "timeout"})

    @property
    def base_url(self) -> str:
        return f"https://{self.endpoint}"


@dataclass
class ShadowConfig:
    """Target device and named shadow"""
    device_ref: str
    device_shadow: str

    def __post_init__(self):
        """Validate shadow configuration."""
        for name in ('device_ref', 'device_shadow'):
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ConfigurationError(f"{name} cannot be empty", "MISSING_VALUE", {"field": name})
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"{name} must be a string, got {type(value).__name__}",
                    "INVALID_VALUE",
                    {"field": name}
                )

        if not is_valid_thing_name(self.device_ref):
            raise ConfigurationError(
                f"device_ref is not a valid thing name: {self.device_ref}",
                "INVALID_VALUE",
                {"field": "device_ref"}
            )


@dataclass
class IotShadowConfig:
    """Complete configuration for publishing device shadow updates"""
    publisher: PublisherConfig
    shadow: ShadowConfig

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'IotShadowConfig':
        """Load configuration from a parsed JSON document"""
        try:
            iot = data['aws']['iot']
            device = data['iot']['device']
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration format: missing section {e}", "INVALID_FORMAT")

        if not isinstance(iot, Mapping) or not isinstance(device, Mapping):
            raise ConfigurationError("Invalid configuration format: sections must be objects", "INVALID_FORMAT")

        access_key_id = iot.get('aws-access-key-id', '')
        secret_key = iot.get('aws-secret-key') or resolve_secret_key(access_key_id)

        try:
            publisher = PublisherConfig(
                endpoint=iot.get('endpoint', ''),
                region=iot.get('region', ''),
                aws_access_key_id=access_key_id,
                aws_secret_key=secret_key or '',
                service=iot.get('service', DEFAULT_SERVICE_NAME),
                timeout=float(iot.get('timeout', DEFAULT_TIMEOUT)),
                verify_ssl=bool(iot.get('verify-ssl', True)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

        shadow = ShadowConfig(
            device_ref=device.get('device-ref', ''),
            device_shadow=device.get('device-shadow', ''),
        )
        return cls(publisher=publisher, shadow=shadow)

    @classmethod
    def from_json(cls, json_string: str) -> 'IotShadowConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'IotShadowConfig':
        """Load configuration from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        logger.info(f"Loaded IoT shadow configuration from {file_path}")
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'IotShadowConfig':
        """Load configuration from environment variables"""
        env = os.environ if environ is None else environ

        access_key_id = env.get(ENV_ACCESS_KEY_ID, '')
        secret_key = env.get(ENV_SECRET_KEY) or resolve_secret_key(access_key_id)

        publisher = PublisherConfig(
            endpoint=env.get(ENV_ENDPOINT, ''),
            region=env.get(ENV_REGION, ''),
            aws_access_key_id=access_key_id,
            aws_secret_key=secret_key or '',
        )
        shadow = ShadowConfig(
            device_ref=env.get(ENV_DEVICE_REF, ''),
            device_shadow=env.get(ENV_DEVICE_SHADOW, ''),
        )
        return cls(publisher=publisher, shadow=shadow)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON layout, without the secret key"""
        return {
            'aws': {'iot': {
                'endpoint': self.publisher.endpoint,
                'region': self.publisher.region,
                'aws-access-key-id': self.publisher.aws_access_key_id,
                'service': self.publisher.service,
                'timeout': self.publisher.timeout,
                'verify-ssl': self.publisher.verify_ssl,
            }},
            'iot': {'device': {
                'device-ref': self.shadow.device_ref,
                'device-shadow': self.shadow.device_shadow,
            }},
        }


def resolve_secret_key(access_key_id: str) -> Optional[str]:
    """
    Look up the secret key for an access key id in the OS keyring.

    Args:
        access_key_id: Access key id used as keyring username

    Returns:
        str or None: Secret key, or None when keyring is unavailable or has no entry

    Raises:
        ConfigurationError: If the keyring backend fails
    """
    if not access_key_id or not KEYRING_AVAILABLE:
        return None

    try:
        secret = keyring.get_password(KEYRING_SERVICE_NAME, access_key_id)
    except KeyringError as e:
        raise ConfigurationError(f"Keyring retrieval failed: {e}", "KEYRING_RETRIEVAL_FAILED")

    if secret is not None:
        logger.debug(f"Resolved secret key for {access_key_id} from OS keyring")
    return secret


def _normalize_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip()
    if '://' in endpoint:
        parsed = urlparse(endpoint)
        if parsed.scheme != 'https' or not parsed.netloc:
            raise ConfigurationError(f"Invalid endpoint: {endpoint}", "INVALID_VALUE", {"field": "endpoint"})
        endpoint = parsed.netloc
    return endpoint.rstrip('/')


def is_valid_thing_name(name: str) -> bool:
    """Check a device ref against the AWS IoT thing name rules."""
    return isinstance(name, str) and THING_NAME_PATTERN.match(name) is not None
