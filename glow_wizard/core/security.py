"""
Identity verification backed by Firebase Authentication
"""
from typing import Any, Dict
import logging

import firebase_admin
from firebase_admin import auth, credentials

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

def initialize_firebase() -> None:
    """Initialize the Firebase Admin SDK once per process"""
    if firebase_admin._apps:
        return

    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    if settings.FIREBASE_SERVICE_ACCOUNT_PATH:
        cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
        firebase_admin.initialize_app(cred, options)
    else:
        # Application default credentials, or the auth emulator when FIREBASE_AUTH_EMULATOR_HOST is set
        firebase_admin.initialize_app(options=options)
    logger.info("Firebase Admin SDK initialized successfully")

def extract_bearer_token(authorization: str) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Missing Authorization header")
    token = authorization.split("Bearer ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Missing Authorization header")
    return token

def verify_id_token(id_token: str) -> Dict[str, Any]:
    """
    Verify a Firebase ID token and return the caller identity.

    The decoded token is trusted as opaque; only uid, email and auth_time
    are relayed.
    """
    try:
        initialize_firebase()
        decoded = auth.verify_id_token(id_token)
    except Exception as e:
        logger.error(f"Auth failed: {e}")
        raise AuthenticationError("Invalid token") from e

    return {
        "uid": decoded.get("uid"),
        "email": decoded.get("email"),
        "authTime": decoded.get("auth_time"),
    }
