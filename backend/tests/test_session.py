import pytest

from signage.security.crypto_engine import SessionSigner, SigningAlgorithm
from signage.security.session import issue_token, verify_token

SECRET = "test-secret"
SIGNER = SessionSigner(SECRET)


class TestSessionSigner:
    @pytest.mark.parametrize("algorithm", list(SigningAlgorithm))
    def test_sign_and_verify(self, algorithm):
        signer = SessionSigner(SECRET, algorithm)
        signature = signer.sign(b"payload")
        assert signer.verify(b"payload", signature)
        assert not signer.verify(b"payload!", signature)
        assert not SessionSigner("other-secret", algorithm).verify(b"payload", signature)

    def test_non_ascii_signature_is_a_mismatch(self):
        assert not SIGNER.verify(b"payload", "ünïcode")

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(ValueError):
            SessionSigner(SECRET, "MD5")


class TestSessionToken:
    def test_valid_token(self):
        token = issue_token("admin", ttl_seconds=60, now=1000, signer=SIGNER)
        payload = verify_token(token, now=1030, signer=SIGNER)
        assert payload is not None
        assert payload.username == "admin"

    def test_expired_token(self):
        token = issue_token("admin", ttl_seconds=60, now=1000, signer=SIGNER)
        assert verify_token(token, now=1061, signer=SIGNER) is None

    def test_tampered_token(self):
        token = issue_token("admin", ttl_seconds=60, now=1000, signer=SIGNER)
        encoded, signature = token.rsplit(".", 1)
        forged = issue_token("mallory", ttl_seconds=60, now=1000, signer=SessionSigner("guess")).rsplit(".", 1)[0]
        assert verify_token(f"{forged}.{signature}", now=1000, signer=SIGNER) is None
        assert verify_token(f"{encoded}.{'0' * len(signature)}", now=1000, signer=SIGNER) is None

    @pytest.mark.parametrize("token", [None, "", "garbage", "!!!.abc"])
    def test_garbage_is_not_logged_in(self, token):
        assert verify_token(token, now=1000, signer=SIGNER) is None

    def test_algorithm_switch_invalidates_tokens(self):
        token = issue_token("admin", now=1000, signer=SessionSigner(SECRET, SigningAlgorithm.HMAC_SHA256))
        other = SessionSigner(SECRET, SigningAlgorithm.HMAC_SHA3_256)
        assert verify_token(token, now=1000, signer=other) is None
