import json
import logging
import os
import threading

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials, firestore

import core.config  # noqa: F401  (loads .env)

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def initialize_firebase():
    """Initialize Firebase Admin SDK with production-ready credential handling"""
    with _init_lock:
        try:
            firebase_admin.get_app()
            return
        except ValueError:
            pass  # not initialized yet

        # Method 1: Service Account Key from Environment Variable (Recommended for production)
        service_account_key_json = os.getenv('FIREBASE_SERVICE_ACCOUNT_KEY')

        if service_account_key_json:
            try:
                # Parse the JSON string from environment variable
                service_account_info = json.loads(service_account_key_json)
                firebase_admin.initialize_app(credentials.Certificate(service_account_info))
                logger.info("Firebase Admin SDK initialized with Service Account Key from environment variable.")
                return
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Error parsing FIREBASE_SERVICE_ACCOUNT_KEY: {e}")

        # Method 2: Service Account Key File (for local development only)
        service_account_key_path = os.getenv('FIREBASE_SERVICE_ACCOUNT_KEY_PATH')
        if service_account_key_path and os.path.exists(service_account_key_path):
            firebase_admin.initialize_app(credentials.Certificate(service_account_key_path))
            logger.info("Firebase Admin SDK initialized with Service Account Key from file path.")
            return

        # Method 3: GOOGLE_APPLICATION_CREDENTIALS or Application Default Credentials
        firebase_admin.initialize_app()
        logger.info("Firebase Admin SDK initialized with Application Default Credentials.")


# Initialized on first use so the app imports without credentials
def verify_id_token(token: str) -> dict:
    initialize_firebase()
    return firebase_auth.verify_id_token(token)


def get_firestore_client():
    initialize_firebase()
    return firestore.client()
