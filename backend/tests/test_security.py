"""
ClientHub Backend - Password Hashing and Token Unit Tests
==========================================================

What:  PasswordHasher and TokenService in isolation (no database, no HTTP).
"""

import time
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from clienthub.exceptions import InvalidTokenError, MissingTokenError
from clienthub.services.security import PasswordHasher, TokenIdentity, TokenService

SECRET = "unit-test-secret-with-at-least-32-characters"


class TestPasswordHasher:

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=1000)

    def test_hash_then_verify(self):
        digest = self.hasher.hash("s3cret-password")
        assert digest != "s3cret-password"
        assert self.hasher.verify("s3cret-password", digest) is True

    def test_wrong_password_fails(self):
        digest = self.hasher.hash("s3cret-password")
        assert self.hasher.verify("not-the-password", digest) is False

    def test_hashes_are_salted(self):
        assert self.hasher.hash("same-password") != self.hasher.hash("same-password")

    def test_unparseable_digest_reads_as_mismatch(self):
        assert self.hasher.verify("anything", "plain-text-not-a-hash") is False

    def test_empty_inputs(self):
        assert self.hasher.verify("", self.hasher.hash("x-password")) is False
        assert self.hasher.verify("password", "") is False
        with pytest.raises(ValueError):
            self.hasher.hash("")


class TestTokenService:

    def setup_method(self):
        self.tokens = TokenService(secret=SECRET, expire_minutes=60)

    def test_issue_then_verify_returns_same_username(self):
        identity = self.tokens.verify(self.tokens.issue("alice"))
        assert identity.username == "alice"
        assert identity.expires_at is not None
        assert identity.expires_at > identity.issued_at

    def test_token_for_one_user_never_decodes_to_another(self):
        alice = self.tokens.verify(self.tokens.issue("alice"))
        bob = self.tokens.verify(self.tokens.issue("bob"))
        assert alice.username == "alice"
        assert bob.username == "bob"

    def test_no_exp_claim_when_lifetime_disabled(self):
        tokens = TokenService(secret=SECRET, expire_minutes=0)
        token = tokens.issue("alice")
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert "exp" not in payload
        assert tokens.verify(token).expires_at is None

    def test_missing_token(self):
        with pytest.raises(MissingTokenError):
            self.tokens.verify(None)
        with pytest.raises(MissingTokenError):
            self.tokens.verify("")

    def test_wrong_signature_rejected(self):
        other = TokenService(secret="another-secret-with-at-least-32-chars!!")
        with pytest.raises(InvalidTokenError) as exc_info:
            self.tokens.verify(other.issue("alice"))
        assert exc_info.value.status_code == 403

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            self.tokens.verify("not.a.jwt")

    def test_expired_token_rejected(self):
        past = time.time() - 3600
        token = jwt.encode(
            {"username": "alice", "iat": past, "exp": int(past + 60)}, SECRET, algorithm="HS256"
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            self.tokens.verify(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_token_without_iat_rejected(self):
        token = jwt.encode({"username": "alice"}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            self.tokens.verify(token)

    def test_token_without_username_rejected(self):
        token = jwt.encode({"iat": time.time()}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            self.tokens.verify(token)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenService(secret="")


class TestTokenIdentity:

    def test_issued_before_aware_datetime(self):
        now = datetime.now(timezone.utc)
        identity = TokenIdentity(username="alice", issued_at=now.timestamp())
        assert identity.issued_before(now + timedelta(seconds=1)) is True
        assert identity.issued_before(now - timedelta(seconds=1)) is False

    def test_naive_datetime_treated_as_utc(self):
        now = datetime.now(timezone.utc)
        identity = TokenIdentity(username="alice", issued_at=now.timestamp())
        naive_later = (now + timedelta(seconds=5)).replace(tzinfo=None)
        assert identity.issued_before(naive_later) is True
