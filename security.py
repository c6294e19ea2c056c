import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import pyotp
from jose import JWTError, jwt
from passlib.context import CryptContext

SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TOTP_ISSUER = "SuperStore"


# Passwords
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# Session tokens
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_session_id(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


# Authenticator codes
def generate_totp_secret() -> str:
    return pyotp.random_base32()


def totp_code(secret: str, at: datetime, step_offset: int = 0) -> str:
    return pyotp.TOTP(secret).at(int(at.timestamp()), counter_offset=step_offset)


def verify_totp(secret: str, code: str, at: datetime, window: int = 1) -> bool:
    """Accept ``code`` if it matches any step within ``window`` of ``at``."""
    if not secret or not code:
        return False
    return pyotp.TOTP(secret).verify(code.strip(), for_time=int(at.timestamp()), valid_window=window)


def totp_provisioning_uri(secret: str, label: str, issuer: str = TOTP_ISSUER) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=label, issuer_name=issuer)
