"""Authentication helpers: signed access tokens carrying the tenant claim."""

from .jwt import create_access_token, decode_token

__all__ = ["create_access_token", "decode_token"]
