# tests/test_security.py
from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    get_user_id_from_token,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret-admin")

    assert hashed != "s3cret-admin"
    assert verify_password("s3cret-admin", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("anything", None)


def test_user_id_from_access_token():
    token = create_access_token({"sub": "17"})

    assert get_user_id_from_token(token) == 17
    assert get_user_id_from_token(f"Bearer {token}") == 17
    assert decode_token(token)["type"] == "access"


def test_expired_token():
    token = create_access_token({"sub": "17"}, expires_delta=timedelta(seconds=-5))

    with pytest.raises(ValueError, match="expired"):
        get_user_id_from_token(token)


def test_refresh_token_is_not_an_access_token():
    token = jwt.encode(
        {"sub": "17", "type": "refresh"},
        settings.security.JWT_SECRET_KEY.get_secret_value(),
        algorithm=settings.security.JWT_ALGORITHM,
    )

    with pytest.raises(ValueError, match="type"):
        get_user_id_from_token(token)


def test_token_without_numeric_subject():
    with pytest.raises(ValueError):
        get_user_id_from_token(create_access_token({"sub": "admin"}))
    with pytest.raises(ValueError):
        get_user_id_from_token(create_access_token({}))


def test_token_signed_with_another_key():
    token = jwt.encode({"sub": "17", "type": "access"}, "another-key", algorithm="HS256")

    with pytest.raises(ValueError, match="Invalid"):
        get_user_id_from_token(token)
