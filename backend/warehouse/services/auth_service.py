# Overview: Service-layer operations for accounts; encapsulates business logic and database work.

"""
Account lifecycle: registration, email verification, login and password reset.

States:
- Unverified -> Verified, one way, by presenting a matching unexpired
  verification token.
- Independently, an account may hold one outstanding reset token. It is
  consumed exactly once and cleared on use; a new request replaces it.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default)
- Minimum 8 characters with at least one letter and one digit
- Email tokens stored as SHA-256 hashes, compared by exact hash match plus
  expiry check
- Email dispatch is best-effort and never fails the primary operation
"""

import re
from datetime import timedelta

import bcrypt
from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..validation import ValidationError, NotFoundError
from . import notification_service
from .token_service import generate_email_token, hash_token
from warehouse.time_utils import utcnow


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


class UnauthorizedError(Exception):
    """Wrong credentials."""
    pass


class ForbiddenError(Exception):
    """Credentials are right but the account may not log in yet."""
    pass


class InvalidTokenError(ValueError):
    """Verification or reset token is unknown, already used, or expired."""
    pass


def normalize_email(email) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def validate_email(email: str) -> None:
    if not email:
        raise ValidationError("Email is required")
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address")


def validate_password_strength(password) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or not password:
        raise PasswordValidationError("Password is required")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def _issue_verification_token(user: User) -> str:
    token = generate_email_token()
    user.verification_token_hash = hash_token(token)
    user.verification_token_expires = utcnow() + timedelta(
        hours=current_app.config["VERIFICATION_TOKEN_HOURS"]
    )
    return token


def register_user(
    email: str,
    password: str,
    name: str | None = None,
    warehouse_name: str | None = None,
) -> tuple[User, str]:
    """
    Create an unverified account and email its verification link.

    Returns (user, plaintext_verification_token).

    Raises:
        ValidationError: invalid email, duplicate email
        PasswordValidationError: weak password
    """
    email = normalize_email(email)
    validate_email(email)

    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise ValidationError("Email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=(name or "").strip() or None,
        warehouse_name=(warehouse_name or "").strip() or None,
        is_verified=False,
    )
    token = _issue_verification_token(user)

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.session.rollback()
        raise ValidationError("Email already exists")

    notification_service.notify(notification_service.send_verification_email, user, token)
    return user, token


def verify_email(token: str) -> User:
    """
    Mark the account owning ``token`` verified and clear the token.

    Raises InvalidTokenError for unknown, used or expired tokens.
    """
    if not token:
        raise InvalidTokenError("Invalid or expired verification token")

    user = db.session.query(User).filter(
        User.verification_token_hash == hash_token(token),
        User.verification_token_expires > utcnow(),
    ).first()

    if not user:
        raise InvalidTokenError("Invalid or expired verification token")

    user.is_verified = True
    user.verification_token_hash = None
    user.verification_token_expires = None
    db.session.commit()
    return user


def resend_verification(email: str) -> tuple[User, str]:
    """Issue a fresh verification token for an unverified account."""
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user:
        raise NotFoundError("User not found")
    if user.is_verified:
        raise ValidationError("Email is already verified")

    token = _issue_verification_token(user)
    db.session.commit()

    notification_service.notify(notification_service.send_verification_email, user, token)
    return user, token


def authenticate(email: str, password: str) -> User:
    """
    Authenticate user with email and password.

    Updates last_login_at timestamp on successful authentication.

    Raises:
        UnauthorizedError: unknown email or wrong password
        ForbiddenError: account not yet verified
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()

    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid login credentials")

    if not user.is_verified:
        raise ForbiddenError("Please verify your email before logging in")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def request_password_reset(email: str) -> tuple[User, str]:
    """
    Issue a reset token (replacing any earlier one) and email the link.

    Returns (user, plaintext_reset_token). Raises NotFoundError for unknown
    emails.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user:
        raise NotFoundError("User not found")

    token = generate_email_token()
    user.reset_token_hash = hash_token(token)
    user.reset_token_expires = utcnow() + timedelta(hours=current_app.config["RESET_TOKEN_HOURS"])
    db.session.commit()

    notification_service.notify(notification_service.send_password_reset_link, user, token)
    return user, token


def reset_password(token: str, new_password: str) -> User:
    """
    Consume a reset token and set a new password.

    Raises InvalidTokenError for unknown, used or expired tokens and
    PasswordValidationError for weak passwords. A weak password leaves the
    token usable.

    The token is cleared with a guarded UPDATE (still matching the token
    hash), so of two requests racing on one token only the first succeeds.
    """
    if not token:
        raise InvalidTokenError("Invalid or expired reset token")

    token_hash = hash_token(token)
    user = db.session.query(User).filter(
        User.reset_token_hash == token_hash,
        User.reset_token_expires > utcnow(),
    ).first()

    if not user:
        raise InvalidTokenError("Invalid or expired reset token")

    password_hash = hash_password(new_password)

    result = db.session.execute(
        update(User)
        .where(User.id == user.id, User.reset_token_hash == token_hash)
        .values(password_hash=password_hash, reset_token_hash=None, reset_token_expires=None),
        execution_options={"synchronize_session": False},
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidTokenError("Invalid or expired reset token")

    db.session.commit()
    return user
