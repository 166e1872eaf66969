# backend/signage/security/crypto_engine.py

import hashlib
import hmac
import logging
from enum import Enum
from typing import Optional, Union

from signage import config

logger = logging.getLogger(__name__)


class SigningAlgorithm(str, Enum):
    HMAC_SHA256 = "HMAC_SHA256"
    HMAC_SHA3_256 = "HMAC_SHA3_256"


_DIGESTS = {
    SigningAlgorithm.HMAC_SHA256: hashlib.sha256,
    SigningAlgorithm.HMAC_SHA3_256: hashlib.sha3_256,
}


class SessionSigner:
    """
    Signs and verifies admin session payloads with one secret and algorithm.

    The algorithm name travels inside the token, so switching
    SESSION_SIGNING_ALG logs every admin out.
    """

    def __init__(
        self,
        secret_key: Union[str, bytes],
        algorithm: Union[SigningAlgorithm, str] = SigningAlgorithm.HMAC_SHA256,
    ) -> None:
        try:
            self.algorithm = SigningAlgorithm(algorithm)
        except ValueError as exc:
            raise ValueError(f"Unsupported session signing algorithm: {algorithm}") from exc
        self._key = secret_key if isinstance(secret_key, bytes) else secret_key.encode("utf-8")

    @property
    def algorithm_name(self) -> str:
        return self.algorithm.value

    def sign(self, payload: bytes) -> str:
        return hmac.new(self._key, payload, digestmod=_DIGESTS[self.algorithm]).hexdigest()

    def verify(self, payload: bytes, signature_hex: str) -> bool:
        # bytes so a non-ASCII cookie cannot raise
        return hmac.compare_digest(self.sign(payload).encode("ascii"), signature_hex.encode("utf-8"))


_default_signer: Optional[SessionSigner] = None


def get_session_signer() -> SessionSigner:
    """Signer built from SESSION_SECRET and SESSION_SIGNING_ALG."""
    global _default_signer
    if _default_signer is None:
        try:
            _default_signer = SessionSigner(config.SESSION_SECRET, config.SESSION_SIGNING_ALG)
        except ValueError:
            logger.warning(
                "Unsupported SESSION_SIGNING_ALG %r, falling back to %s",
                config.SESSION_SIGNING_ALG,
                SigningAlgorithm.HMAC_SHA256.value,
            )
            _default_signer = SessionSigner(config.SESSION_SECRET)
    return _default_signer
