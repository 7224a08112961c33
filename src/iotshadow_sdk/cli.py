"""
Command-line interface for IoT Shadow Python SDK
Provides request signing and device shadow publishing from the shell
"""

import argparse
import os
import sys
import json
import logging
from typing import Any, Dict, List, Optional

from . import initialize_sdk, __version__
from .config import IotShadowConfig, resolve_secret_key, DEFAULT_SERVICE_NAME
from .config.publisher_config import ENV_ACCESS_KEY_ID, ENV_SECRET_KEY, ENV_REGION, ENV_ENDPOINT
from .exceptions import IotShadowSDKError, ServerCommunicationError
from .shadow import StatePublisher, build_desired_state
from .signing import SigV4Signer, SigningError, create_signing_context, generate_auth_headers


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='iotshadow-cli',
        description='IoT Shadow SDK command-line interface for SigV4 signing and shadow updates'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'IoT Shadow Python SDK {__version__}'
    )

    parser.add_argument(
        '--check-compatibility',
        action='store_true',
        help='Check platform compatibility and exit'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging, including canonical request and string-to-sign'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_publish_parser(subparsers)

    return parser


def setup_sign_parser(subparsers):
    """Setup request signing subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Compute SigV4 headers for a request')
    sign_parser.add_argument('--access-key-id', default=os.environ.get(ENV_ACCESS_KEY_ID), help='AWS access key id')
    sign_parser.add_argument('--secret-key', default=os.environ.get(ENV_SECRET_KEY), help='AWS secret key (keyring lookup if omitted)')
    sign_parser.add_argument('--region', default=os.environ.get(ENV_REGION), help='AWS region')
    sign_parser.add_argument('--service', default=DEFAULT_SERVICE_NAME, help=f'Service name (default: {DEFAULT_SERVICE_NAME})')
    sign_parser.add_argument('--method', default='POST', help='HTTP method (default: POST)')
    sign_parser.add_argument('--uri', default='/', help='Canonical URI (default: /)')
    sign_parser.add_argument('--host', default=os.environ.get(ENV_ENDPOINT), help='Host header value')
    sign_parser.add_argument('--query', action='append', default=[], metavar='KEY=VALUE', help='Query parameter (repeatable)')
    sign_parser.add_argument('--header', action='append', default=[], metavar='NAME:VALUE', help='Additional header to sign (repeatable)')
    sign_parser.add_argument('--payload', default='', help='Request body')
    sign_parser.add_argument('--timestamp', help='Fixed signing time as YYYYMMDDTHHMMSSZ')
    sign_parser.add_argument('--show-canonical', action='store_true', help='Also print canonical request and string-to-sign')


def setup_publish_parser(subparsers):
    """Setup shadow publish subcommand."""
    publish_parser = subparsers.add_parser('publish', help='Publish a desired state to the device shadow')
    publish_parser.add_argument('--config', help='JSON configuration file (environment variables if omitted)')
    publish_parser.add_argument('--device-ref', help='Device name (overrides configuration)')
    publish_parser.add_argument('--payload', help='Complete shadow document as JSON string')
    publish_parser.add_argument('--attribute', action='append', default=[], metavar='KEY=VALUE', help='Desired attribute (repeatable)')


def parse_pairs(values: List[str], separator: str) -> Dict[str, str]:
    """Parse KEY<sep>VALUE arguments into a dict."""
    pairs = {}
    for item in values:
        key, sep, value = item.partition(separator)
        if not sep or not key:
            raise ValueError(f"Expected KEY{separator}VALUE, got: {item}")
        pairs[key.strip()] = value
    return pairs


def parse_attributes(values: List[str]) -> Dict[str, Any]:
    """Parse KEY=VALUE attributes, decoding values as JSON when possible."""
    attributes = {}
    for key, value in parse_pairs(values, '=').items():
        try:
            attributes[key] = json.loads(value)
        except json.JSONDecodeError:
            attributes[key] = value
    return attributes


def handle_sign_command(args) -> int:
    """Handle request signing command."""
    try:
        if not args.host:
            print("Error: --host is required (or set AWS_IOT_ENDPOINT)", file=sys.stderr)
            return 1

        secret_key = args.secret_key or resolve_secret_key(args.access_key_id)
        headers = parse_pairs(args.header, ':')
        headers['host'] = args.host

        context = create_signing_context(
            access_key_id=args.access_key_id or '',
            secret_key=secret_key or '',
            region=args.region or '',
            service=args.service,
            http_method=args.method,
            canonical_uri=args.uri,
            query_parameters=parse_pairs(args.query, '='),
            headers=headers,
            payload=args.payload,
            timestamp=args.timestamp,
        )

        outcome = generate_auth_headers(context, SigV4Signer(debug=args.verbose))
        if not outcome.ok:
            print(f"Error: signing failed: {outcome.error}", file=sys.stderr)
            return 1

        if args.show_canonical:
            print("Canonical request:")
            print(outcome.result.canonical_request)
            print()
            print("String to sign:")
            print(outcome.result.string_to_sign)
            print()

        print(json.dumps(dict(outcome.headers), indent=2))
        return 0

    except (IotShadowSDKError, SigningError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def handle_publish_command(args) -> int:
    """Handle shadow publish command."""
    try:
        if args.payload and args.attribute:
            print("Error: Cannot specify both --payload and --attribute", file=sys.stderr)
            return 1

        if args.payload:
            payload = args.payload
        elif args.attribute:
            payload = build_desired_state(parse_attributes(args.attribute))
        else:
            print("Error: --payload or --attribute is required", file=sys.stderr)
            return 1

        config = IotShadowConfig.from_file(args.config) if args.config else IotShadowConfig.from_env()
        signer = SigV4Signer(debug=args.verbose)

        with StatePublisher(config, signer=signer) as publisher:
            response = publisher.publish_device_shadow_update(payload, args.device_ref)

        print(json.dumps(response, indent=2))
        return 0

    except ServerCommunicationError as e:
        print(f"Server communication error: {e}", file=sys.stderr)
        return 1
    except (IotShadowSDKError, SigningError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        result = initialize_sdk(logging.DEBUG if args.verbose else logging.WARNING)

        if args.check_compatibility:
            if result['hmac_sha256_supported']:
                print("✓ Platform is compatible with IoT Shadow SDK")
                return 0
            print("✗ Platform is not compatible with IoT Shadow SDK")
            print("  Error: cryptography package with HMAC-SHA256 support is required")
            return 1

        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'publish':
            return handle_publish_command(args)
        else:
            # No command specified, show help
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
