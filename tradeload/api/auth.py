"""
Token signers for trader sessions and management calls.

Trader calls carry a bearer JWT describing the trader. Management calls
carry their whole body as a JWS in general JSON serialization, signed by
every configured management key.
"""

import json
import secrets
import time
from typing import Any, Callable, Optional

import jwt

from ..data.models import Trader


def _standard_claims(
    issuer: str,
    audience: str,
    subject: str,
    ttl_seconds: int,
    clock: Callable[[], float]
) -> dict[str, Any]:
    now = int(clock())
    return {
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": secrets.token_hex(10),
        "sub": subject,
        "iss": issuer,
        "aud": audience,
    }


class TraderTokenSigner:
    """Issues short-lived bearer tokens acting as a given trader."""

    def __init__(
        self,
        private_key: str,
        algorithm: str = "RS256",
        issuer: str = "barong",
        audience: str = "peatio",
        ttl_seconds: int = 60,
        clock: Optional[Callable[[], float]] = None
    ):
        self.private_key = private_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.time

    def token_for(self, trader: Trader) -> str:
        """Sign a session token for ``trader``."""
        payload = _standard_claims(self.issuer, self.audience, "session", self.ttl_seconds, self._clock)
        payload.update({
            "role": "member",
            "email": trader.email,
            "uid": trader.uid,
            "level": trader.level,
            "state": trader.state,
        })
        return jwt.encode(payload, self.private_key, algorithm=self.algorithm)

    def authorization_header(self, trader: Trader) -> str:
        return f"Bearer {self.token_for(trader)}"


class ManagementTokenSigner:
    """Signs management request bodies with one or more named keys."""

    def __init__(
        self,
        keys: dict[str, str],
        algorithm: str = "RS256",
        issuer: str = "tradeload",
        audience: str = "peatio",
        ttl_seconds: int = 60,
        clock: Optional[Callable[[], float]] = None
    ):
        if not keys:
            raise ValueError("At least one management signing key is required")
        self.keys = dict(keys)
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.time
        self._jws = jwt.PyJWS()

    def sign(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Wrap ``data`` in a multi-signed JWS.

        Args:
            data: Request fields carried under the ``data`` claim

        Returns:
            JWS general JSON serialization: shared payload plus one entry
            per signer under ``signatures``
        """
        payload = _standard_claims(self.issuer, self.audience, "api", self.ttl_seconds, self._clock)
        payload["data"] = data
        payload_bytes = json.dumps(payload, separators=(",", ":")).encode("utf-8")

        encoded_payload = None
        signatures = []
        for kid, key in self.keys.items():
            compact = self._jws.encode(payload_bytes, key, algorithm=self.algorithm, headers={"kid": kid})
            protected, encoded_payload, signature = compact.split(".")
            signatures.append({
                "protected": protected,
                "header": {"kid": kid},
                "signature": signature,
            })

        return {"payload": encoded_payload, "signatures": signatures}
