"""Password hashing for stored user credentials.

Only the bcrypt hash is ever persisted; plaintext passwords live no longer
than the request (and the notification job) that carries them.
"""

import os
from passlib.context import CryptContext
from dotenv import load_dotenv

load_dotenv()

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a plaintext password (bcrypt)."""
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext password against a stored hash.

    Returns False for a mismatch or for a hash passlib cannot parse.
    """
    if not hashed:
        return False
    try:
        return _pwd_context.verify(password, hashed)
    except ValueError:
        return False
