"""
Firebase Firestore initialization.
Single-source-of-truth Firestore client and report store for the API.
"""

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore_async, initialize_app

from app.core.settings import settings
from app.services.report_store import FirestoreReportStore, InMemoryReportStore, ReportStore

logger = logging.getLogger(__name__)

db = None

REQUIRED_CREDENTIAL_FIELDS = ["type", "project_id", "private_key", "client_email"]


def _validate_credentials_file(cred_path: str) -> None:
    if not os.path.exists(cred_path):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Check FIREBASE_CREDENTIALS_PATH in your .env file."
        )

    try:
        with open(cred_path, "r", encoding="utf-8") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Firebase credentials file is not valid JSON: {e}")

    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if field not in cred_data]
    if missing_fields:
        raise ValueError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Please download a fresh service account key from Firebase Console."
        )

    logger.info(f"[FIRESTORE] Credentials file validated, project: {cred_data.get('project_id', 'N/A')}")


def initialize_firestore():
    """Initialize firebase_admin once and create the async Firestore client."""
    global db

    if db is not None:
        return db

    try:
        if not firebase_admin._apps:
            options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
            if settings.FIREBASE_CREDENTIALS_PATH:
                _validate_credentials_file(settings.FIREBASE_CREDENTIALS_PATH)
                initialize_app(credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH), options)
                logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
            else:
                logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
                initialize_app(options=options)

        db = firestore_async.client()
        logger.info(f"[FIRESTORE] Using Firestore project: {settings.FIREBASE_PROJECT_ID or 'default'}")
        return db

    except (FileNotFoundError, ValueError) as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - invalid credentials.\n{e}"
        ) from e
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {e}\n"
            f"Please check your Firebase credentials and configuration."
        ) from e


def get_db():
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore cannot be initialized.
    """
    if db is None:
        initialize_firestore()
    return db


def create_report_store(use_mock: Optional[bool] = None) -> ReportStore:
    """Report store for the configured backend (in-memory when USE_MOCK_DB)."""
    if use_mock is None:
        use_mock = settings.USE_MOCK_DB

    if use_mock:
        logger.warning("[FIRESTORE] USING IN-MEMORY REPORT STORE - data is lost on restart")
        return InMemoryReportStore()

    return FirestoreReportStore(get_db(), settings.REPORTS_COLLECTION)
