"""Core: config, startup wiring, and cross-cutting HTTP concerns.

Single place for settings and application bootstrap.
"""

from gatekeeper.core.config import Settings, get_settings, validate_jwt_settings

__all__ = ["Settings", "get_settings", "validate_jwt_settings"]
