"""Authentication helpers for the dashboard API."""

from .tokens import TokenData, create_access_token, require_admin, verify_token

__all__ = ['TokenData', 'create_access_token', 'require_admin', 'verify_token']
