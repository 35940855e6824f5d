from fastapi import APIRouter, Depends

from easylaptop.core.dependencies import get_credential_store
from easylaptop.core.security import get_current_user
from easylaptop.models.user import User
from easylaptop.schemas.user import ProfileResponse, ProfileUpdate, UserRead
from easylaptop.services.credentials import CredentialStore

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    # email and role are not part of ProfileUpdate, so they cannot change here
    user = store.update_profile(
        current_user,
        name=payload.name,
        phone=payload.phone,
        college=payload.college,
        user_type=payload.user_type,
    )
    return ProfileResponse(message="Profile updated successfully", user=UserRead.model_validate(user))
