# backend/auth/services.py

from typing import Optional

from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token
from models.user_model import User
from models import db


def _session_payload(user: User) -> dict:
    # the token identity doubles as the owner id on every ledger row
    payload = user.to_dict()
    payload["token"] = create_access_token(identity=user.owner_id)
    return payload


def find_user(identity) -> Optional[User]:
    """User for a JWT identity, or None for owners from an external identity provider."""
    if identity is None or not str(identity).isdigit():
        return None
    return db.session.get(User, int(identity))


def register_user(data):

    existing = User.query.filter_by(email=data.email.lower()).first()
    if existing:
        return None, "User already exists"

    user = User(
        name=data.name.strip(),
        email=data.email.lower(),
        password=generate_password_hash(data.password),
        currency=data.currency,
    )

    db.session.add(user)
    db.session.commit()

    return _session_payload(user), None


def login_user(data):

    user = User.query.filter_by(email=data.email.lower()).first()

    if not user or not check_password_hash(user.password, data.password):
        return None, "Invalid email or password"

    return _session_payload(user), None
