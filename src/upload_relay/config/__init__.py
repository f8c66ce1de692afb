"""
Configuration management for the upload relay.

Contains the Pydantic settings used by the API, the CLI and the Lambda
entrypoint.
"""

from upload_relay.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
