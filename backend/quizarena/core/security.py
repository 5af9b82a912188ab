"""
Security utilities for QuizArena.

Handles password hashing, JWT token creation/verification, and
payment signature checks.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import hashlib
import hmac
import secrets

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings


# Account roles carried in the "role" claim
ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
ROLE_SUB_ADMIN = "SUB_ADMIN"
ALL_ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_SUB_ADMIN)


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password)


def token_lifetime(role: str) -> timedelta:
    """Admins and sub-admins keep their session longer than players."""
    if role == ROLE_USER:
        return timedelta(minutes=settings.USER_TOKEN_EXPIRE_MINUTES)
    return timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (the account ID)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include in the token

    Returns:
        str: The encoded JWT token
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.USER_TOKEN_EXPIRE_MINUTES)

    to_encode: Dict[str, Any] = {"sub": subject, "exp": now + expires_delta}

    # Add additional claims if provided
    if additional_claims:
        to_encode.update(additional_claims)

    # Add issued at time
    to_encode["iat"] = now

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def create_account_token(account) -> str:
    """Issue a token for a User, Admin or SubAdmin row."""
    return create_access_token(
        subject=str(account.id),
        expires_delta=token_lifetime(account.role),
        additional_claims={
            "id": account.id,
            "email": account.email,
            "role": account.role
        }
    )


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token to verify

    Returns:
        Optional[Dict[str, Any]]: The decoded token payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None


def generate_order_id() -> str:
    """Generate an opaque, unique payment order reference."""
    return f"order_{secrets.token_hex(12)}"


def sign_payment(order_id: str, provider_payment_id: str) -> str:
    """
    Compute the checkout signature for a payment.

    The gateway signs "<order_id>|<provider_payment_id>" with the shared
    secret using HMAC-SHA256 and sends the hex digest back to the client.
    """
    message = f"{order_id}|{provider_payment_id}".encode("utf-8")
    return hmac.new(
        settings.PAYMENT_SECRET.encode("utf-8"),
        message,
        hashlib.sha256
    ).hexdigest()


def verify_payment_signature(
    order_id: str,
    provider_payment_id: str,
    signature: str
) -> bool:
    """Constant-time comparison of a received checkout signature."""
    expected = sign_payment(order_id, provider_payment_id)
    return hmac.compare_digest(expected, signature)
