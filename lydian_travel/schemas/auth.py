from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field as PydanticField, StringConstraints

NameStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=200),
]
PhoneStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=5, max_length=20),
]
TokenStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

SignupRole = Literal["traveler", "property_owner", "vehicle_owner", "transfer_owner"]


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_user: int
    name: str
    lastname: str
    email: str
    phone: str
    imageurl: Optional[str] = None
    birthdate: Optional[datetime] = None
    city: Optional[str] = None
    role: str
    status: str
    email_verified: bool
    created_at: Optional[datetime] = None


class RegisterRequest(BaseModel):
    name: NameStr
    lastname: NameStr
    email: EmailStr
    phone: PhoneStr
    password: str
    password_confirmation: str
    role: SignupRole = "traveler"
    accept_terms: bool = False


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember_me: bool = False


class RefreshRequest(BaseModel):
    refresh_token: TokenStr


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class RegisterResponse(TokenResponse):
    verification_required: bool = True


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: TokenStr
    new_password: str
    password_confirmation: str


class VerifyEmailRequest(BaseModel):
    token: TokenStr


class PasswordStrengthRequest(BaseModel):
    password: str


class PasswordStrengthResponse(BaseModel):
    strength: Literal["weak", "medium", "strong"]
    score: int = PydanticField(..., ge=0, le=5)


class MessageResponse(BaseModel):
    message: str


class UserUpdate(BaseModel):
    name: Optional[NameStr] = None
    lastname: Optional[NameStr] = None
    phone: Optional[PhoneStr] = None
    imageurl: Optional[str] = None
    birthdate: Optional[datetime] = None
    city: Optional[str] = PydanticField(None, max_length=100)
