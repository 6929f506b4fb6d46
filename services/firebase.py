# backend/services/firebase.py

import os
import firebase_admin
from firebase_admin import credentials, firestore, db
from firebase_admin import exceptions as firebase_exceptions

INSTRUCTORS_PATH = "Instructors"

_firestore = None
_rtdb = None


def _service_account():
    """
    Service account fields from the environment (Render safe)
    """
    return {
        "type": "service_account",
        "project_id": os.getenv("FIREBASE_PROJECT_ID"),
        "private_key_id": os.getenv("FIREBASE_PRIVATE_KEY_ID"),
        "private_key": os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n"),
        "client_email": os.getenv("FIREBASE_CLIENT_EMAIL"),
        "client_id": os.getenv("FIREBASE_CLIENT_ID"),
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "client_x509_cert_url": os.getenv("FIREBASE_CLIENT_CERT_URL"),
    }


def init_firebase():
    """
    Connect read-only clients: Realtime DB for instructor telemetry,
    Firestore for room metadata.
    """
    global _firestore, _rtdb

    if firebase_admin._apps:
        return

    firebase_admin.initialize_app(
        credentials.Certificate(_service_account()),
        {"databaseURL": os.getenv("FIREBASE_RTDB_URL")},
    )
    _firestore = firestore.client()
    _rtdb = db.reference()

    print(f"[Firebase] Connected, reading /{INSTRUCTORS_PATH} and rooms")


def get_firestore():
    if not _firestore:
        raise RuntimeError("Firestore not initialized")
    return _firestore


def get_rtdb():
    if not _rtdb:
        raise RuntimeError("Realtime DB not initialized")
    return _rtdb


def get_instructors_ref():
    """
    /Instructors
    """
    return get_rtdb().child(INSTRUCTORS_PATH)


# ===============================
# Snapshot Reads
# ===============================
def safe_get(ref, default=None):
    """
    Value at `ref`, or `default` when the path is missing or the read fails.
    """
    try:
        data = ref.get()
    except firebase_exceptions.NotFoundError:
        return default
    except firebase_exceptions.FirebaseError as e:
        print(f"Warning: Error reading {getattr(ref, 'path', ref)}: {e}")
        return default
    return default if data is None else data


def fetch_instructors_snapshot(ref=None):
    """
    Full /Instructors subtree as one snapshot ({} when absent).
    """
    snapshot = safe_get(ref if ref is not None else get_instructors_ref(), {})
    return snapshot if isinstance(snapshot, dict) else {}
