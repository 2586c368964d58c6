import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.core.config import Settings, settings
from lydian_travel.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)
from lydian_travel.models.account_token import (
    PURPOSE_EMAIL_VERIFICATION,
    PURPOSE_PASSWORD_RESET,
    AccountToken,
)
from lydian_travel.models.audit_log import AuditLog
from lydian_travel.models.session import UserSession
from lydian_travel.models.user import User
from lydian_travel.repository import (
    account_token_repository,
    audit_log_repository,
    session_repository,
    user_repository,
)
from lydian_travel.schemas.auth import (
    LoginRequest,
    PasswordResetConfirm,
    RegisterRequest,
    UserUpdate,
)
from lydian_travel.services.booking_utils import ensure_utc, utcnow
from lydian_travel.services.email_service import EmailService

logger = logging.getLogger(__name__)


def password_strength(password: str) -> Tuple[str, int]:
    """Score a password from 0 to 5 and label it weak, medium or strong."""
    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if re.search(r"[a-z]", password) and re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"\d", password):
        score += 1
    if re.search(r"[^A-Za-z0-9]", password):
        score += 1

    if score >= 5:
        return "strong", score
    if score >= 3:
        return "medium", score
    return "weak", score


def is_password_acceptable(password: str) -> bool:
    return (
        len(password) >= 8
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"\d", password) is not None
    )


def _validation_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _check_new_password(password: str, confirmation: str) -> None:
    if password != confirmation:
        raise _validation_error("Passwords do not match")
    if not is_password_acceptable(password):
        raise _validation_error("Password is too weak")


class AuthService:
    def __init__(
        self,
        db: Session,
        *,
        email_service: Optional[EmailService] = None,
        config: Optional[Settings] = None,
    ):
        self.db = db
        self._settings = config or settings
        self._email_service = email_service or EmailService(config=self._settings)

    def _audit(self, user_id: Optional[int], action: str, message: str, state: str = "success") -> None:
        audit_log_repository.create_audit_log(
            self.db,
            AuditLog(id_user=user_id, entity="User", action=action, message=message, state=state),
        )

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s: %s", message, exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            ) from exc

    def _issue_tokens(self, user: User, remember_me: bool) -> Tuple[str, str, datetime]:
        refresh_days = (
            self._settings.REMEMBER_ME_REFRESH_DAYS
            if remember_me
            else self._settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        claims = {"email": user.email, "role": user.role}
        access_token = create_token(
            str(user.id_user),
            ACCESS_TOKEN_TYPE,
            timedelta(minutes=self._settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            claims,
        )
        refresh_token = create_token(str(user.id_user), REFRESH_TOKEN_TYPE, timedelta(days=refresh_days))
        return access_token, refresh_token, utcnow() + timedelta(days=refresh_days)

    def _open_session(self, user: User, remember_me: bool = False) -> Dict[str, object]:
        access_token, refresh_token, expires_at = self._issue_tokens(user, remember_me)
        session_repository.create_session(
            self.db,
            UserSession(
                id_user=user.id_user,
                access_token=access_token,
                refresh_token=refresh_token,
                is_active=True,
                remember_me=remember_me,
                expires_at=expires_at,
            ),
        )
        return self._token_payload(user, access_token, refresh_token)

    def _token_payload(self, user: User, access_token: str, refresh_token: str) -> Dict[str, object]:
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": self._settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": user,
        }

    def _issue_account_token(self, user: User, purpose: str, lifetime: timedelta) -> str:
        token = secrets.token_urlsafe(32)
        account_token_repository.create_token(
            self.db,
            AccountToken(
                id_user=user.id_user,
                token=token,
                purpose=purpose,
                expires_at=utcnow() + lifetime,
            ),
        )
        return token

    def _consume_account_token(self, token: str, purpose: str) -> AccountToken:
        record = account_token_repository.get_token(self.db, token, purpose)
        if record is None or record.used_at is not None or ensure_utc(record.expires_at) < utcnow():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired token",
            )
        account_token_repository.mark_used(self.db, record, utcnow())
        return record

    def register(self, payload: RegisterRequest) -> Dict[str, object]:
        if payload.password != payload.password_confirmation:
            raise _validation_error("Passwords do not match")
        if not is_password_acceptable(payload.password):
            raise _validation_error("Password is too weak")
        if not payload.accept_terms:
            raise _validation_error("Terms must be accepted")

        if user_repository.get_user_by_email(self.db, payload.email) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email already exists",
            )

        user = user_repository.create_user(
            self.db,
            User(
                name=payload.name,
                lastname=payload.lastname,
                email=payload.email.lower(),
                phone=payload.phone,
                password_hash=hash_password(payload.password),
                role=payload.role,
                status="active",
                email_verified=False,
            ),
        )
        verification_token = self._issue_account_token(
            user,
            PURPOSE_EMAIL_VERIFICATION,
            timedelta(hours=self._settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
        )
        response = self._open_session(user)
        self._audit(user.id_user, "register", "User registered")
        self._commit("Unexpected error while saving user")
        self.db.refresh(user)

        self._email_service.send_email_verification(user, verification_token)
        response["verification_required"] = True
        return response

    def login(self, payload: LoginRequest) -> Dict[str, object]:
        user = user_repository.get_user_by_email(self.db, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            self._audit(user.id_user if user else None, "login_failed", f"Failed login for {payload.email}", "error")
            self._commit("Could not complete login")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )
        if user.status != "active":
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

        response = self._open_session(user, payload.remember_me)
        self._audit(user.id_user, "login", "User login")
        self._commit("Could not complete login")
        return response

    def refresh(self, refresh_token: str) -> Dict[str, object]:
        invalid = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
        try:
            decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        except JWTError as exc:
            raise invalid from exc

        user_session = session_repository.get_session_by_refresh_token(self.db, refresh_token)
        if user_session is None or not user_session.is_active:
            raise invalid
        if user_session.expires_at is not None and ensure_utc(user_session.expires_at) < utcnow():
            session_repository.deactivate_session(self.db, user_session)
            self._commit("Could not refresh session")
            raise invalid

        user = user_session.user
        if user.status != "active":
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

        access_token, new_refresh_token, expires_at = self._issue_tokens(user, user_session.remember_me)
        user_session.access_token = access_token
        user_session.refresh_token = new_refresh_token
        user_session.expires_at = expires_at
        self._commit("Could not refresh session")
        return self._token_payload(user, access_token, new_refresh_token)

    def logout(self, user_session: UserSession) -> None:
        session_repository.deactivate_session(self.db, user_session)
        self._audit(user_session.id_user, "logout", "User logout")
        self._commit("Could not complete logout")

    def request_password_reset(self, email: str) -> None:
        user = user_repository.get_user_by_email(self.db, email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = self._issue_account_token(
            user,
            PURPOSE_PASSWORD_RESET,
            timedelta(minutes=self._settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
        self._audit(user.id_user, "password_reset_requested", "Password reset requested")
        self._commit("Could not start password reset")
        self._email_service.send_password_reset(user, token)

    def reset_password(self, payload: PasswordResetConfirm) -> None:
        record = self._consume_account_token(payload.token, PURPOSE_PASSWORD_RESET)
        _check_new_password(payload.new_password, payload.password_confirmation)

        user = user_repository.get_user_by_id(self.db, record.id_user)
        user.password_hash = hash_password(payload.new_password)
        revoked = session_repository.deactivate_sessions_by_user(self.db, user.id_user)
        self._audit(user.id_user, "password_reset", f"Password reset, {revoked} sessions revoked")
        self._commit("Could not reset password")

    def verify_email(self, token: str) -> User:
        record = self._consume_account_token(token, PURPOSE_EMAIL_VERIFICATION)
        user = user_repository.get_user_by_id(self.db, record.id_user)
        user.email_verified = True
        self._audit(user.id_user, "email_verified", "Email address verified")
        self._commit("Could not verify email")
        self.db.refresh(user)
        return user

    def resend_verification(self, email: str) -> None:
        user = user_repository.get_user_by_email(self.db, email)
        if user is None or user.email_verified:
            return
        token = self._issue_account_token(
            user,
            PURPOSE_EMAIL_VERIFICATION,
            timedelta(hours=self._settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
        )
        self._commit("Could not issue verification token")
        self._email_service.send_email_verification(user, token)

    def update_profile(self, user: User, payload: UserUpdate) -> User:
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        self._audit(user.id_user, "profile_update", "Profile updated")
        self._commit("Could not update profile")
        self.db.refresh(user)
        return user
