"""Unit tests for JWT token generation and validation

Tests cover:
- Token creation with tenant claims
- Token decoding and validation
- Expired and tampered tokens
"""

from uuid import uuid4

import jwt
import pytest

from recruitiq.auth.jwt import create_access_token, decode_token


class TestAccessTokens:
    """Test JWT round trips"""

    def test_token_contains_tenant_claims(self):
        user_id, org_id = uuid4(), uuid4()
        token = create_access_token(user_id=user_id, org_id=org_id, role="recruiter")

        payload = decode_token(token)
        assert payload["sub"] == str(user_id)
        assert payload["org_id"] == str(org_id)
        assert payload["role"] == "recruiter"
        assert payload["exp"] > payload["iat"]

    def test_role_is_optional(self):
        payload = decode_token(create_access_token(user_id=uuid4(), org_id=uuid4()))
        assert "role" not in payload

    def test_expired_token_rejected(self):
        token = create_access_token(user_id=uuid4(), org_id=uuid4(), expires_in_minutes=-5)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)

    def test_tampered_token_rejected(self):
        token = create_access_token(user_id=uuid4(), org_id=uuid4())
        header, _, signature = token.split(".")
        forged = jwt.encode({"sub": "x", "org_id": str(uuid4())}, "wrong-secret-wrong-secret-wrong-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(".".join([header, forged.split(".")[1], signature]))
