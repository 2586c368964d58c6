from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.core.config import settings
from lydian_travel.dependencies import get_db
from lydian_travel.models.audit_log import AuditLog
from lydian_travel.models.session import UserSession
from lydian_travel.models.user import User
from lydian_travel.repository import audit_log_repository, session_repository

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(password, password_hash)


def create_token(
    subject: str,
    token_type: str,
    expires_delta: timedelta,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    now = datetime.now(timezone.utc)
    to_encode: Dict[str, Any] = dict(extra or {})
    to_encode.update(
        {
            "sub": subject,
            "type": token_type,
            "iat": now,
            "exp": now + expires_delta,
            "jti": secrets.token_hex(8),
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, expected_type: str) -> Dict[str, Any]:
    """Decode a JWT and check its type, raising JWTError on any mismatch."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_session(token: str, db: Session) -> UserSession:
    try:
        payload = decode_token(token, ACCESS_TOKEN_TYPE)
    except JWTError as exc:
        _log_security_event(db, "token_decode_error", f"Invalid token: {exc}")
        raise _credentials_exception() from exc

    if payload.get("sub") is None:
        _log_security_event(db, "token_missing_sub", "Token payload missing subject")
        raise _credentials_exception()

    user_session = session_repository.get_session_by_access_token(db, token)
    if user_session is None or not user_session.is_active:
        raise _credentials_exception()
    if str(user_session.id_user) != str(payload["sub"]):
        _log_security_event(db, "token_subject_mismatch", f"Subject {payload['sub']} mismatch")
        raise _credentials_exception()

    user = user_session.user
    if user is None:
        raise _credentials_exception()
    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )
    return user_session


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserSession:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _resolve_session(credentials.credentials, db)


def get_current_user(user_session: UserSession = Depends(get_current_session)) -> User:
    return user_session.user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if credentials is None or not credentials.credentials:
        return None
    return _resolve_session(credentials.credentials, db).user


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency that only lets the given roles (and admins) through."""

    allowed = set(roles) | {"admin"}

    def _dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return _dependency


def _log_security_event(db: Session, action: str, message: str) -> None:
    try:
        audit_entry = AuditLog(
            id_user=None,
            entity="Security",
            action=action,
            message=message,
            state="error",
        )
        audit_log_repository.create_audit_log(db, audit_entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
