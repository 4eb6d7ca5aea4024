# app/security.py
from typing import Optional

import bcrypt
from itsdangerous import BadData, URLSafeTimedSerializer

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt="session-v1")


def issue_token(user_id: int, secret: str) -> str:
    """Signed, timestamped session token carrying the user id."""
    return _serializer(secret).dumps({"sub": user_id})


def read_token(token: str, secret: str, max_age: int) -> Optional[int]:
    """Return the user id of a valid token younger than ``max_age`` seconds, else None."""
    try:
        payload = _serializer(secret).loads(token, max_age=max_age)
    except BadData:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
