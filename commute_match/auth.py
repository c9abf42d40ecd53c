from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import Header
from typing import Optional

from commute_match.core.config import settings
from commute_match.core.exceptions import UnauthorizedError

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * settings.jwt_expiration_days


def create_access_token(data: dict) -> str:
    """
    Mint a signed token carrying `data` (e.g. {"user_id": ...}).
    Not called by any route: logins happen in the identity system, this is for
    operators issuing service tokens and for the test client.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        raise UnauthorizedError("Invalid token")


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    if not authorization:
        raise UnauthorizedError("Token not provided")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise UnauthorizedError("Invalid token format")

    if scheme.lower() != "bearer":
        raise UnauthorizedError("Invalid authentication scheme")

    payload = decode_token(token)
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    return user_id
