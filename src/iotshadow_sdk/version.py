"""Version information for the IoT Shadow Python SDK"""

__version__ = "0.1.0"
