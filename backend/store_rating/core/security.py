# store_rating/core/security.py
"""
Security module for authentication.
Handles password hashing, the password policy, and JWT token creation/validation.
"""
import datetime as dt
from dataclasses import dataclass

import jwt  # PyJWT
from passlib.context import CryptContext

from store_rating.config import settings

# Password hashing context
# Argon2 is a modern, salted, deliberately slow password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# JWT configuration
JWT_SECRET = settings.jwt_secret  # Secret key for JWT signing
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes  # Token lifetime in minutes
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Password policy
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16
PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified access token."""
    user_id: int
    email: str
    role: str


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    The comparison is done by the hash library itself; hashes are never
    compared directly.
    """
    return pwd_context.verify(plain, hashed)


def password_policy_errors(password: str) -> list[str]:
    """
    Return the list of policy rules the password breaks (empty when acceptable).

    Rules: 8-16 characters, at least one uppercase letter, at least one
    special character from PASSWORD_SPECIAL_CHARS.
    """
    errors = []
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        errors.append(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
        )
    if not any(c.isupper() for c in password):
        errors.append("Password must contain at least one uppercase letter")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        errors.append("Password must contain at least one special character")
    return errors


def check_password_policy(password: str) -> str:
    """Raise ValueError if the password breaks the policy; return it unchanged otherwise."""
    errors = password_policy_errors(password)
    if errors:
        raise ValueError("; ".join(errors))
    return password


def create_access_token(user_id: int | str, email: str, role: str) -> str:
    """
    Create a JWT access token for user authentication.

    Token payload includes:
        - sub: Subject (user ID, as a string)
        - email: User email
        - role: User role at issue time
        - iat: Issued at timestamp
        - exp: Expiration timestamp

    The role claim is informational only; authorization re-reads the user
    from the database on every request.
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": str(role),
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, malformed or tampered with
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])


def verify_access_token(token: str) -> TokenClaims:
    """
    Decode a token and return its typed claims.

    Raises:
        jwt.InvalidTokenError: If the token does not verify or its claims are unusable
    """
    payload = decode_access_token(token)
    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=str(payload["email"]),
            role=str(payload["role"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise jwt.InvalidTokenError(f"Malformed token claims: {e}") from e
