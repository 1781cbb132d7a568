"""Firebase Admin SDK configuration and initialization"""

import os
import logging

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)

_firebase_app = None


def get_credentials_file() -> str:
    """Credentials path from FIREBASE_CREDENTIALS_FILE, else the per-environment default"""
    cred_file = os.getenv("FIREBASE_CREDENTIALS_FILE")
    if cred_file:
        return cred_file

    if os.getenv("ENV", "local") == "production":
        return "firebase-credentials.json"
    return "firebase-credentials-dev.json"


def initialize_firebase() -> firebase_admin.App:
    """
    Initialize the Firebase Admin SDK once and cache the app.

    Raises:
        FileNotFoundError: If the credentials file is missing
    """
    global _firebase_app

    if _firebase_app is not None:
        return _firebase_app

    cred_file = get_credentials_file()

    if not os.path.exists(cred_file):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_file}. "
            "Token verification is unavailable until a service account file is provided."
        )

    try:
        cred = credentials.Certificate(cred_file)
        _firebase_app = firebase_admin.initialize_app(cred)
        logger.info(f"Firebase initialized with credentials from: {cred_file}")
        return _firebase_app
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        raise


def get_firebase_app() -> firebase_admin.App:
    if _firebase_app is None:
        return initialize_firebase()
    return _firebase_app


def is_firebase_initialized() -> bool:
    return _firebase_app is not None
