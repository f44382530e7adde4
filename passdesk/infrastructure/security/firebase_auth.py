"""Firebase ID token verification (google-auth, no firebase-admin).

The dashboard signs users in with Firebase Auth and sends the ID token as
``Authorization: Bearer <token>``. The token's ``sub`` claim is the user id.
"""

import asyncio
from typing import Any

from google.auth import exceptions as google_auth_exceptions
from google.auth import jwt as google_jwt
from google.auth.transport.requests import Request
from google.oauth2 import id_token


def _verify(token: str, audience: str) -> dict[str, Any]:
    return id_token.verify_firebase_token(token, Request(), audience=audience)


async def verify_id_token(
    token: str, audience: str | None, *, verify: bool = True
) -> dict[str, Any]:
    """Verify a Firebase ID token and return its claims.

    With verify=False (local Auth emulator) the claims are decoded without
    checking the signature.

    Args:
        token: Raw ID token.
        audience: Firebase project id the token must be issued for.
        verify: Check signature, issuer, audience and expiry.

    Returns:
        Decoded claims; ``sub`` holds the user id.

    Raises:
        ValueError: If the token is malformed, expired or issued for another project.
    """
    if not verify:
        try:
            return google_jwt.decode(token, verify=False)
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            raise ValueError(f"Malformed ID token: {e}") from e
    if not audience:
        raise ValueError("No Firebase project configured to verify ID tokens")
    try:
        claims = await asyncio.to_thread(_verify, token, audience)
    except google_auth_exceptions.GoogleAuthError as e:
        raise ValueError(f"Invalid ID token: {e}") from e
    if not claims or not claims.get("sub"):
        raise ValueError("ID token has no subject")
    return claims
