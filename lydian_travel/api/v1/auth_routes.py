from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_session, get_current_user
from lydian_travel.dependencies import get_db, get_email_service
from lydian_travel.models.session import UserSession
from lydian_travel.models.user import User
from lydian_travel.schemas.auth import (
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserResponse,
    UserUpdate,
    VerifyEmailRequest,
)
from lydian_travel.services.auth_service import AuthService, password_strength
from lydian_travel.services.email_service import EmailService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    register_data: RegisterRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    return auth_service.register(register_data)


@router.post("/login", response_model=TokenResponse)
def login_user(
    login_data: LoginRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    return auth_service.login(login_data)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    return auth_service.refresh(payload.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout_user(
    user_session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    auth_service.logout(user_session)
    return {"message": "Logged out"}


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def request_password_reset(
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Always accepted so callers cannot tell which emails are registered."""

    auth_service = AuthService(db, email_service=email_service)
    auth_service.request_password_reset(payload.email)
    return {"message": "If the account exists, a reset link has been sent"}


@router.post("/password-reset/confirm", response_model=MessageResponse)
def confirm_password_reset(
    payload: PasswordResetConfirm,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    auth_service.reset_password(payload)
    return {"message": "Password has been reset"}


@router.post("/verify-email", response_model=UserResponse)
def verify_email(
    payload: VerifyEmailRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    return auth_service.verify_email(payload.token)


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def resend_verification(
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    auth_service.resend_verification(payload.email)
    return {"message": "If the account needs verification, an email has been sent"}


@router.post("/password-strength", response_model=PasswordStrengthResponse)
def check_password_strength(payload: PasswordStrengthRequest):
    strength, score = password_strength(payload.password)
    return {"strength": strength, "score": score}


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_me(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    auth_service = AuthService(db, email_service=email_service)
    return auth_service.update_profile(current_user, payload)
