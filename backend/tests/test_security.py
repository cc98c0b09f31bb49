from datetime import timedelta

import pytest

from app.services.security import (
    InvalidToken,
    TokenType,
    create_token,
    decode_token,
    hash_password,
    placeholder_password_hash,
    verify_password,
)


def test_hash_is_salted_and_verifiable():
    first = hash_password("correct horse")
    second = hash_password("correct horse")

    assert first != "correct horse"
    assert first != second
    assert verify_password("correct horse", first)
    assert verify_password("correct horse", second)
    assert not verify_password("correct horse!", first)
    assert not verify_password("", first)


def test_verify_against_malformed_hash_is_false():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_placeholder_hash_does_not_match_empty_password():
    placeholder = placeholder_password_hash()
    assert not verify_password("", placeholder)


def test_token_valid_before_expiry():
    token = create_token("user-1", TokenType.SESSION, timedelta(minutes=5))
    claims = decode_token(token, TokenType.SESSION)
    assert claims["sub"] == "user-1"


def test_token_invalid_after_expiry():
    token = create_token("user-1", TokenType.SESSION, timedelta(seconds=-5))
    with pytest.raises(InvalidToken):
        decode_token(token, TokenType.SESSION)


def test_token_type_is_enforced():
    reset_token = create_token("user-1", TokenType.RESET, timedelta(minutes=5))
    with pytest.raises(InvalidToken):
        decode_token(reset_token, TokenType.SESSION)


def test_tampered_token_is_rejected():
    token = create_token("user-1", TokenType.SESSION, timedelta(minutes=5))
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])
    with pytest.raises(InvalidToken):
        decode_token(forged, TokenType.SESSION)
