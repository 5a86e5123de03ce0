"""Service for managing users and login sessions in MongoDB."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError
from werkzeug.security import check_password_hash, generate_password_hash

from pdf_api.errors import ValidationError


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_indexes(db: Database) -> None:
    """Create the unique lookups used by login and session checks."""
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.sessions.create_index([("token", ASCENDING)], unique=True)
    db.sessions.create_index([("expires_at", ASCENDING)])


def create_user(db: Database, email: str, password: str) -> str:
    """
    Register a user allowed to log in.

    Args:
        db: Database holding the ``users`` collection
        email: Login email, stored lower-cased
        password: Plain-text password, stored as a salted hash

    Returns:
        The MongoDB document ID as a string
    """
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError("Email and password are required")

    document = {
        "email": email,
        "password_hash": generate_password_hash(password),
        "created_at": datetime.utcnow(),
    }

    try:
        result = db.users.insert_one(document)
    except DuplicateKeyError as exc:
        raise ValidationError(f"User {email} already exists") from exc

    return str(result.inserted_id)


def verify_credentials(db: Database, email: str, password: str) -> Optional[Dict[str, Any]]:
    """Return the user document when the password matches, None otherwise."""
    user = db.users.find_one({"email": normalize_email(email)})
    if not user or not check_password_hash(user["password_hash"], password or ""):
        return None

    user["_id"] = str(user["_id"])
    return user


def save_session(db: Database, token: str, email: str, expires_at: int) -> str:
    """
    Save a login session.

    Args:
        db: Database holding the ``sessions`` collection
        token: The bearer token handed to the client
        email: The user the session belongs to
        expires_at: Unix timestamp when the session expires

    Returns:
        The token that was saved
    """
    document = {
        "token": token,
        "email": normalize_email(email),
        "expires_at": expires_at,
        "created_at": datetime.utcnow(),
    }

    db.sessions.update_one(
        {"token": token},
        {"$set": document},
        upsert=True
    )

    return token


def get_session(db: Database, token: str) -> Optional[Dict[str, Any]]:
    """Retrieve a session by token, or None if it does not exist."""
    document = db.sessions.find_one({"token": token})

    if document:
        document["_id"] = str(document["_id"])
        if "created_at" in document:
            document["issued_at"] = int(document["created_at"].timestamp())

    return document


def delete_session(db: Database, token: str) -> bool:
    """Delete a session; True if one was removed."""
    result = db.sessions.delete_one({"token": token})
    return result.deleted_count > 0


def cleanup_expired_sessions(db: Database) -> int:
    """Remove expired sessions and return how many were deleted."""
    result = db.sessions.delete_many({
        "expires_at": {"$lte": int(time.time())}
    })
    return result.deleted_count
