"""Firestore integration (REST API + google-auth)."""

from passdesk.infrastructure.firebase.client import (
    close_firebase,
    get_firebase_project_id,
    get_firestore_client,
    init_firebase,
)
from passdesk.infrastructure.firebase.record_store import FirestoreRecordStore

__all__ = [
    "FirestoreRecordStore",
    "close_firebase",
    "get_firebase_project_id",
    "get_firestore_client",
    "init_firebase",
]
