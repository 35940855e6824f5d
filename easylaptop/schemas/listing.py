from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from easylaptop.schemas.user import SellerRead


class ListingRead(BaseModel):
    id: int
    title: str
    description: str
    price: float
    images: List[str] = []
    thumbnail_url: Optional[str] = None

    brand: str
    model: Optional[str] = None
    processor: Optional[str] = None
    ram: Optional[str] = None
    storage: Optional[str] = None
    screen_size: Optional[str] = None
    condition: str
    year: Optional[int] = None

    seller: SellerRead
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: str

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingEnvelope(BaseModel):
    message: str
    laptop: ListingRead


class MessageResponse(BaseModel):
    message: str
