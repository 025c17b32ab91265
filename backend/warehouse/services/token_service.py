# Overview: Bearer token issuance and validation; email token helpers.

"""
Token Service

Two kinds of tokens live here:

- Access tokens: HS256 JWTs signed with JWT_SECRET, subject = user id,
  expiring after JWT_EXPIRES_DAYS. Stateless; validation resolves the owning
  user and rejects tokens whose user no longer exists.
- Email tokens (verification, password reset): random hex values. Only a
  SHA-256 hash is persisted; the plaintext goes out in the email link.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta, timezone

from flask import current_app
from jose import JWTError, jwt

from ..extensions import db
from ..models import User
from warehouse.time_utils import utcnow


def generate_email_token() -> str:
    """
    Generate an unguessable email token.

    Returns a 40-character hex string (20 bytes of entropy).
    """
    return secrets.token_hex(20)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: tokens are already high-entropy (unlike passwords)
    and must be looked up by value.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_access_token(user: User) -> str:
    now = utcnow().replace(tzinfo=timezone.utc)
    claims = {
        "sub": str(user.id),
        "iat": now,
        "exp": now + timedelta(days=current_app.config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def validate_access_token(token: str) -> User | None:
    """
    Return the user a token belongs to, or None.

    None covers: bad signature, malformed token, expired token, missing or
    non-numeric subject, and deleted user.
    """
    try:
        claims = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError:
        return None

    subject = claims.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None

    return db.session.get(User, user_id)
