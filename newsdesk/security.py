from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from newsdesk.config import settings

# bcrypt salts every hash; the cost factor comes from settings so tests
# can run with the minimum number of rounds.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of *password*."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Check *password* against *password_hash* using the hash's own
    constant-time verify routine.

    When there is no hash to check against (unknown account) a dummy
    verification still runs so the response time does not reveal
    whether the account exists.
    """
    if not password_hash:
        pwd_context.dummy_verify()
        return False
    return pwd_context.verify(password, password_hash)


def issue_token(
    user_id: int,
    email: str,
    role: str,
    secret: str,
    ttl: timedelta,
    algorithm: str = settings.JWT_ALGORITHM,
) -> str:
    """Sign a bearer token binding *user_id*, *email* and *role* until now + *ttl*."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    algorithm: str = settings.JWT_ALGORITHM,
) -> Optional[dict]:
    """
    Decode *token* and return ``{"user_id", "email", "role"}``.

    Returns None for anything that is malformed, expired, signed with a
    different secret or missing identity claims; callers treat None as
    an anonymous request.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None

    try:
        user_id = int(claims["sub"])
        email = claims["email"]
        role = claims["role"]
    except (KeyError, TypeError, ValueError):
        return None
    if not isinstance(email, str) or not isinstance(role, str):
        return None
    return {"user_id": user_id, "email": email, "role": role}


def token_for(user) -> str:
    """Issue a token for a User row with the configured secret and TTL."""
    return issue_token(
        user.id,
        user.email,
        user.role.value,
        settings.SECRET_KEY,
        timedelta(minutes=settings.TOKEN_TTL_MINUTES),
    )
