from fastapi import Depends
from sqlalchemy.orm import Session

from easylaptop.core.config import Settings, get_settings
from easylaptop.core.database import get_db
from easylaptop.services.credentials import CredentialStore
from easylaptop.services.image_storage import ImageStorage
from easylaptop.services.listings import ListingRepository


def get_credential_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CredentialStore:
    return CredentialStore(db, rounds=settings.bcrypt_rounds)


def get_image_storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    return ImageStorage(settings)


def get_listing_repository(
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_settings),
) -> ListingRepository:
    return ListingRepository(db, storage=storage, max_images=settings.max_images)
