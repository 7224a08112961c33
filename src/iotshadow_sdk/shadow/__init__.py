"""
Device shadow publishing for IoT Shadow Python SDK
"""

from .publisher import (
    StatePublisher,
    build_desired_state,
    shadow_uri,
)

__all__ = [
    'StatePublisher',
    'build_desired_state',
    'shadow_uri',
]
