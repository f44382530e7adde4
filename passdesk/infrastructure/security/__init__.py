"""Firebase ID token verification and per-request caller context."""

from passdesk.infrastructure.security.context import HeaderProjectSelection, RequestIdentity
from passdesk.infrastructure.security.firebase_auth import verify_id_token

__all__ = ["HeaderProjectSelection", "RequestIdentity", "verify_id_token"]
