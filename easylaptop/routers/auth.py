from fastapi import APIRouter, Depends, status

from easylaptop.core.dependencies import get_credential_store
from easylaptop.core.errors import Unauthenticated, ValidationError
from easylaptop.core.security import TokenService, get_current_user, get_token_service
from easylaptop.models.user import User
from easylaptop.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead
from easylaptop.services.credentials import CredentialStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    user = store.create(
        name=payload.name,
        email=payload.email,
        raw_password=payload.password,
        phone=payload.phone,
        college=payload.college,
        user_type=payload.user_type,
    )
    return AuthResponse(
        message="User registered successfully",
        token=tokens.issue(user.id),
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    if not payload.email or not payload.password:
        raise ValidationError("Please provide email and password")

    user = store.authenticate(payload.email, payload.password)
    if user is None:
        raise Unauthenticated("Invalid email or password")

    return AuthResponse(
        message="Login successful",
        token=tokens.issue(user.id),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return UserRead.model_validate(current_user)
