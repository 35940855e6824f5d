from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

# JSON keys are camelCase (userType, createdAt); Python attributes stay snake_case
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    # optional here so missing values get the store's own 400 message
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    user_type: Optional[str] = None

    model_config = CAMEL_CONFIG


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    user_type: Optional[str] = None

    model_config = CAMEL_CONFIG


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    college: Optional[str] = None
    user_type: str
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SellerRead(BaseModel):
    """Public owner fields embedded in a listing."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    college: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserRead


class ProfileResponse(BaseModel):
    message: str
    user: UserRead
