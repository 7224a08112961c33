"""
Exception classes for IoT Shadow Python SDK
"""

from typing import Optional, Dict, Any


class IotShadowSDKError(Exception):
    """Base exception for all IoT Shadow SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ValidationError(IotShadowSDKError):
    """Exception raised for validation failures"""
    pass


class UnsupportedPlatformError(IotShadowSDKError):
    """Exception raised when platform features are not supported"""
    pass


class ConfigurationError(IotShadowSDKError):
    """Exception raised for missing or malformed publisher configuration"""
    pass


class ServerCommunicationError(IotShadowSDKError):
    """Exception raised for server communication errors"""
    
    def __init__(self, message: str, error_code: str = "SERVER_ERROR", 
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
