import pytest
from jose import jwt

from gagyebu.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_access_token_carries_session_claims() -> None:
    token = create_access_token("user-1", email="minsu@example.com", name="김민수")

    claims = decode_access_token(token)

    assert claims["sub"] == "user-1"
    assert claims["email"] == "minsu@example.com"
    assert claims["name"] == "김민수"
    assert claims["exp"] > claims["iat"]


def test_foreign_token_is_rejected() -> None:
    forged = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_access_token(forged)
    with pytest.raises(ValueError):
        decode_access_token("not-a-token")


def test_password_verification() -> None:
    hashed = hash_password("password123")

    assert verify_password("password123", hashed) == (True, None)
    assert verify_password("wrong-password", hashed)[0] is False
