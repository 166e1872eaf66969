# backend/signage/security/session.py

"""
Signed admin session token carried in a cookie.

token = base64url(canonical JSON payload) + "." + HMAC(payload)

The payload only holds the username and an expiry; the backend answers a
single question with it: is there an authenticated caller or not.
"""

import base64
import binascii
import json
import logging
import time
from typing import Optional

from pydantic import BaseModel

from signage import config
from signage.security.crypto_engine import SessionSigner, get_session_signer

logger = logging.getLogger(__name__)


class SessionPayload(BaseModel):
    username: str
    expires_at: int
    alg: str


def _canonical_bytes(payload: SessionPayload) -> bytes:
    # sorted keys, no spaces: same input on sign and verify
    return json.dumps(
        payload.model_dump(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def issue_token(
    username: str,
    *,
    ttl_seconds: int | None = None,
    now: float | None = None,
    signer: Optional[SessionSigner] = None,
) -> str:
    if signer is None:
        signer = get_session_signer()
    ttl_seconds = config.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    now = time.time() if now is None else now

    payload = SessionPayload(
        username=username,
        expires_at=int(now + ttl_seconds),
        alg=signer.algorithm_name,
    )
    raw = _canonical_bytes(payload)
    signature = signer.sign(raw)
    encoded = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    return f"{encoded}.{signature}"


def verify_token(
    token: str | None,
    *,
    now: float | None = None,
    signer: Optional[SessionSigner] = None,
) -> SessionPayload | None:
    """
    Returns the payload of a valid, unexpired token, otherwise None.
    A broken token is "not logged in", never an error.
    """
    if not token or "." not in token:
        return None
    if signer is None:
        signer = get_session_signer()
    now = time.time() if now is None else now

    encoded, signature = token.rsplit(".", 1)
    try:
        raw = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except (binascii.Error, ValueError):
        logger.debug("session token is not valid base64")
        return None

    if not signer.verify(raw, signature):
        logger.info("session token signature mismatch")
        return None

    try:
        payload = SessionPayload.model_validate_json(raw)
    except ValueError:
        return None

    if payload.alg != signer.algorithm_name or payload.expires_at <= now:
        return None
    return payload
