"""Signed bearer tokens naming an owning identity.

Plain functions over HS256 JWTs. The service only needs the subject back
out of a token; issuing tokens is for management scripts and tests.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_ISSUER = "postcorpus"


@dataclass(frozen=True)
class OwnerToken:
    """Decoded token claims."""
    owner_id: str
    expires_at: datetime


def create_owner_token(
    owner_id: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Issue a token whose subject is *owner_id*."""
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    if not owner_id:
        raise ValueError("owner_id cannot be empty")

    issued = int(time.time())
    claims = {
        "sub": owner_id,
        "iat": issued,
        "exp": issued + expires_hours * 3600,
        "iss": _ISSUER,
    }
    header = {"alg": algorithm, "typ": "JWT"}
    signing_input = _b64encode(_dump(header)) + b"." + _b64encode(_dump(claims))
    return (signing_input + b"." + _b64encode(_sign(signing_input, secret))).decode()


def decode_owner_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[OwnerToken]:
    """Verify *token* and return its claims.

    Returns ``None`` for a bad signature, an expired or foreign token, or
    anything malformed. The caller decides how absence is reported.
    """
    if algorithm != "HS256":
        return None
    try:
        header_b64, claims_b64, signature_b64 = token.encode().split(b".")
        signing_input = header_b64 + b"." + claims_b64
        if not hmac.compare_digest(_sign(signing_input, secret), _b64decode(signature_b64)):
            return None

        header = json.loads(_b64decode(header_b64))
        claims = json.loads(_b64decode(claims_b64))
        if header.get("alg") != algorithm or claims.get("iss") != _ISSUER:
            return None

        exp = int(claims["exp"])
        owner_id = claims["sub"]
        if time.time() > exp or not isinstance(owner_id, str) or not owner_id:
            return None

        return OwnerToken(owner_id=owner_id, expires_at=datetime.fromtimestamp(exp, tz=timezone.utc))
    except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError):
        return None


def _dump(data: dict) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode()


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


# base64url without padding

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
