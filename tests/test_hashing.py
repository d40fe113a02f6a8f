"""
Tests for PasswordHasher.

Tests cover:
- Record format and salt freshness
- Verification success and failure
- Fail-closed behaviour on malformed input
- needs_rehash
"""
import base64

import pytest

from taskmanager_security.exceptions import InvalidArgument
from taskmanager_security.hashing import (
    DIGEST_SIZE,
    ITERATIONS,
    SALT_SIZE,
    SEPARATOR,
    PasswordHasher,
)


@pytest.fixture(scope="module")
def hasher():
    return PasswordHasher()


@pytest.fixture(scope="module")
def record(hasher):
    return hasher.hash("Correct-Horse-9")


class TestHash:
    """Tests for PasswordHasher.hash."""

    def test_record_format(self, record):
        """Test record is base64(salt):hex(digest)."""
        salt_b64, digest_hex = record.split(SEPARATOR)
        assert len(base64.b64decode(salt_b64)) == SALT_SIZE
        assert len(bytes.fromhex(digest_hex)) == DIGEST_SIZE

    def test_not_the_password(self, record):
        """Test the record does not contain the password."""
        assert record != "Correct-Horse-9"
        assert "Correct-Horse-9" not in record

    def test_fresh_salt(self, hasher):
        """Test hashing twice yields different records."""
        assert hasher.hash("same-password") != hasher.hash("same-password")

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_rejected(self, hasher, value):
        """Test empty password raises InvalidArgument."""
        with pytest.raises(InvalidArgument):
            hasher.hash(value)

    @pytest.mark.parametrize("value", ["\ud800", "pw\udfff", b"bytes-pw"])
    def test_unencodable_rejected(self, hasher, value):
        """Test non-text or non-UTF-8 passwords raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            hasher.hash(value)

    def test_fixed_iterations(self):
        """Test every hasher uses the same round count and reads the others' records."""
        assert PasswordHasher().iterations == PasswordHasher.iterations == ITERATIONS
        encoded = PasswordHasher().hash("shared-pw")
        assert PasswordHasher().verify("shared-pw", encoded) is True


class TestVerify:
    """Tests for PasswordHasher.verify."""

    def test_correct_password(self, hasher, record):
        """Test the right password verifies."""
        assert hasher.verify("Correct-Horse-9", record) is True

    def test_wrong_password(self, hasher, record):
        """Test a different password does not verify."""
        assert hasher.verify("Correct-Horse-8", record) is False

    def test_unicode_password(self, hasher):
        """Test non-ascii passwords round trip."""
        encoded = hasher.hash("contraseña-密码")
        assert hasher.verify("contraseña-密码", encoded) is True
        assert hasher.verify("contrasena-密码", encoded) is False

    def test_both_records_verify(self, hasher):
        """Test two salted records of one password both verify."""
        first = hasher.hash("pw-1")
        second = hasher.hash("pw-1")
        assert hasher.verify("pw-1", first)
        assert hasher.verify("pw-1", second)

    @pytest.mark.parametrize("password,encoded", [
        (None, "x:y"),
        ("", "x:y"),
        ("pw", None),
        ("pw", ""),
        ("pw", "no-separator"),
        ("pw", "a:b:c"),
        ("pw", "!!!notbase64:abcd"),
        ("pw", "c2FsdA==:not-hex"),
        ("pw", ":abcd"),
        ("pw", "c2FsdA==:"),
        (123, "c2FsdA==:abcd"),
    ])
    def test_malformed_fails_closed(self, hasher, password, encoded):
        """Test malformed input returns False without raising."""
        assert hasher.verify(password, encoded) is False

    @pytest.mark.parametrize("password", ["\ud800", "Correct-Horse-9\ud800"])
    def test_unencodable_password_fails_closed(self, hasher, record, password):
        """Test a password with lone surrogates returns False without raising."""
        assert hasher.verify(password, record) is False

    def test_unencodable_record_fails_closed(self, hasher):
        """Test a record with lone surrogates returns False without raising."""
        assert hasher.verify("pw", "\ud800:abcd") is False
        assert hasher.verify("pw", "c2FsdA==:\ud800") is False

    def test_tampered_digest(self, hasher, record):
        """Test a modified digest does not verify."""
        salt, digest = record.split(SEPARATOR)
        flipped = ("0" if digest[0] != "0" else "1") + digest[1:]
        assert hasher.verify("Correct-Horse-9", salt + SEPARATOR + flipped) is False


class TestNeedsRehash:
    """Tests for PasswordHasher.needs_rehash."""

    def test_current_record(self, hasher, record):
        assert hasher.needs_rehash(record) is False

    def test_legacy_md5_record(self, hasher):
        """Test a bare hex digest (legacy MD5) needs rehash."""
        assert hasher.needs_rehash("5f4dcc3b5aa765d61d8327deb882cf99") is True

    def test_short_salt(self, hasher):
        assert hasher.needs_rehash("c2FsdA==:" + "ab" * DIGEST_SIZE) is True

    def test_empty(self, hasher):
        assert hasher.needs_rehash("") is True
