"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens, reset tokens
"""
from datetime import timedelta

import pytest

from storefront.core.security import (
    TokenDecodeError,
    create_access_token,
    decode_token,
    generate_reset_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from storefront.core.types import generate_object_id, is_object_id


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_different_each_time(self):
        """Bcrypt generates different salts"""
        assert get_password_hash('testpassword123') != get_password_hash('testpassword123')

    def test_verify_password_correct(self):
        hashed = get_password_hash('testpassword123')

        assert verify_password('testpassword123', hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash('testpassword123')

        assert verify_password('wrongpassword', hashed) is False

    def test_hash_long_password_truncated(self):
        """Bcrypt has a 72 byte limit"""
        long_password = 'a' * 100
        hashed = get_password_hash(long_password)

        assert verify_password(long_password, hashed) is True

    def test_empty_hash_never_verifies(self):
        assert verify_password('anything', '') is False


class TestJWTTokens:
    """Test JWT token functions"""

    def test_round_trip(self):
        token = create_access_token({'sub': 'abc'})
        payload = decode_token(token)

        assert payload['sub'] == 'abc'
        assert payload['type'] == 'access'
        assert 'exp' in payload

    def test_expired_token_rejected(self):
        token = create_access_token({'sub': 'abc'}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenDecodeError):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(TokenDecodeError) as exc_info:
            decode_token('not.a.token')

        assert exc_info.value.code == 'INVALID_TOKEN'


class TestResetTokens:

    def test_reset_token_hash_is_stable(self):
        token = generate_reset_token()

        assert hash_token(token) == hash_token(token)
        assert hash_token(token) != token
        assert len(hash_token(token)) == 64


class TestObjectIds:

    def test_generated_ids_are_valid(self):
        assert is_object_id(generate_object_id())

    @pytest.mark.parametrize('value', ['', 'abc', 'z' * 24, '0' * 25, None])
    def test_malformed_ids(self, value):
        assert is_object_id(value) is False
