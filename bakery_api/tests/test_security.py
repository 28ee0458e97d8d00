import pytest
from jose import JWTError, jwt

from src.core.security import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    detect_device_type,
    get_password_hash,
    verify_password,
)


def test_password_hash_verifies():
    hashed = get_password_hash("croissant")

    assert hashed != "croissant"
    assert verify_password("croissant", hashed)
    assert not verify_password("baguette", hashed)


def test_access_token_claims():
    claims = decode_token(create_access_token("7", role="manager"), expected_type=ACCESS)

    assert claims["sub"] == "7"
    assert claims["role"] == "manager"


def test_token_type_is_enforced():
    refresh = create_refresh_token("7")

    assert decode_token(refresh, expected_type=REFRESH)["sub"] == "7"
    with pytest.raises(JWTError):
        decode_token(refresh, expected_type=ACCESS)


def test_token_signed_with_another_key_is_rejected():
    forged = jwt.encode({"sub": "1", "type": "access", "role": "super_admin"}, "not-our-key", algorithm="HS256")

    with pytest.raises(JWTError):
        decode_token(forged)


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        (None, "Unknown"),
        ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile", "Mobile"),
        ("Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X)", "Tablet"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "Desktop - Windows"),
        ("Mozilla/5.0 (X11; Linux x86_64)", "Desktop - Linux"),
        ("curl/8.0", "Unknown"),
    ],
)
def test_detect_device_type(user_agent, expected):
    assert detect_device_type(user_agent) == expected
