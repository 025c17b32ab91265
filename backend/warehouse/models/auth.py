from __future__ import annotations

from ..extensions import db
from warehouse.time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    Warehouse account.

    Email is globally unique and stored normalized (trimmed, lowercased).
    Verification and reset tokens are stored as SHA-256 hashes; the plaintext
    only ever leaves the server inside the emailed link.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    name = db.Column(db.String(120), nullable=True)
    warehouse_name = db.Column(db.String(120), nullable=True)

    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_token_hash = db.Column(db.String(64), nullable=True, index=True)
    verification_token_expires = db.Column(db.DateTime(timezone=True), nullable=True)

    reset_token_hash = db.Column(db.String(64), nullable=True, index=True)
    reset_token_expires = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "warehouse_name": self.warehouse_name,
            "is_verified": self.is_verified,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }
