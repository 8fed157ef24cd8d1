"""JWT token generation and validation

Access tokens are the only trusted source of tenant identity for HTTP
requests. The organization is taken from the signed ``org_id`` claim, never
from request bodies or query parameters.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): User ID as UUID string
- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires (iat + JWT_EXPIRY_MINUTES)

Custom Claims:
- org_id: Organization (tenant) ID as UUID string
  Purpose: bound to the request's TenantSession before any query runs
- role: User's role within the organization (optional)

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "org_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
  "role": "recruiter",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from ..config import get_settings


def create_access_token(
    user_id: UUID,
    org_id: UUID,
    role: Optional[str] = None,
    expires_in_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for an authenticated user.

    Args:
        user_id: User's UUID
        org_id: Organization's UUID
        role: User's role, if any
        expires_in_minutes: Override of JWT_EXPIRY_MINUTES (negative values
            produce an already-expired token)

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    expiry_minutes = settings.JWT_EXPIRY_MINUTES if expires_in_minutes is None else expires_in_minutes

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=expiry_minutes)

    payload: Dict[str, Any] = {
        'sub': str(user_id),
        'org_id': str(org_id),
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }
    if role is not None:
        payload['role'] = role

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
