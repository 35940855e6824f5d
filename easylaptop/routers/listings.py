from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from easylaptop.core.dependencies import get_image_storage, get_listing_repository
from easylaptop.core.security import get_current_user, get_optional_user
from easylaptop.models.listing import Listing
from easylaptop.models.user import User
from easylaptop.schemas.listing import ListingEnvelope, ListingRead, MessageResponse
from easylaptop.schemas.user import SellerRead
from easylaptop.services.image_storage import ImageStorage
from easylaptop.services.listings import ListingFilter, ListingRepository

router = APIRouter(prefix="/laptops", tags=["laptops"])


def _to_read(listing: Listing) -> ListingRead:
    """Convert a Listing row (owner and images loaded) to its response shape."""
    images = listing.image_refs
    return ListingRead(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        price=listing.price,
        images=images,
        # first image doubles as the thumbnail
        thumbnail_url=images[0] if images else None,
        brand=listing.brand,
        model=listing.model,
        processor=listing.processor,
        ram=listing.ram,
        storage=listing.storage,
        screen_size=listing.screen_size,
        condition=listing.condition,
        year=listing.year,
        seller=SellerRead.model_validate(listing.owner),
        contact_email=listing.contact_email,
        contact_phone=listing.contact_phone,
        status=listing.status,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )


def listing_form(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    processor: Optional[str] = Form(None),
    ram: Optional[str] = Form(None),
    storage: Optional[str] = Form(None),
    screen_size: Optional[str] = Form(None, alias="screenSize"),
    condition: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    contact_email: Optional[str] = Form(None, alias="contactEmail"),
    contact_phone: Optional[str] = Form(None, alias="contactPhone"),
    listing_status: Optional[str] = Form(None, alias="status"),
) -> dict:
    """Collect the multipart text fields; validation happens in the repository."""
    return {
        "title": title,
        "description": description,
        "price": price,
        "brand": brand,
        "model": model,
        "processor": processor,
        "ram": ram,
        "storage": storage,
        "screen_size": screen_size,
        "condition": condition,
        "year": year,
        "contact_email": contact_email,
        "contact_phone": contact_phone,
        "status": listing_status,
    }


@router.get("", response_model=List[ListingRead])
def list_laptops(
    search: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    condition: Optional[str] = None,
    listing_status: Optional[str] = Query(None, alias="status"),
    college_filter: Optional[str] = Query(None, alias="collegeFilter"),
    listings: ListingRepository = Depends(get_listing_repository),
    caller: Optional[User] = Depends(get_optional_user),
):
    filters = ListingFilter.from_query(
        search=search,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        condition=condition,
        status=listing_status,
        college_filter=college_filter,
    )
    return [_to_read(l) for l in listings.list(filters, caller=caller)]


# declared before "/{listing_id}" so the literal path wins
@router.get("/user/my-listings", response_model=List[ListingRead])
def my_listings(
    listings: ListingRepository = Depends(get_listing_repository),
    current_user: User = Depends(get_current_user),
):
    return [_to_read(l) for l in listings.list_for_owner(current_user.id)]


@router.get("/{listing_id}", response_model=ListingRead)
def get_laptop(
    listing_id: str,
    listings: ListingRepository = Depends(get_listing_repository),
):
    return _to_read(listings.get_by_id(listing_id))


@router.post("", response_model=ListingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_laptop(
    fields: dict = Depends(listing_form),
    images: Optional[List[UploadFile]] = File(None),
    listings: ListingRepository = Depends(get_listing_repository),
    storage: ImageStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user),
):
    # reject bad input before any file touches the disk
    listings.check_fields(fields)
    refs = await storage.save_uploads(images or [])
    try:
        listing = listings.create(fields, current_user, image_refs=refs)
    except Exception:
        storage.delete(refs)
        raise
    return ListingEnvelope(message="Laptop listing created successfully", laptop=_to_read(listing))


@router.put("/{listing_id}", response_model=ListingEnvelope)
async def update_laptop(
    listing_id: str,
    fields: dict = Depends(listing_form),
    images: Optional[List[UploadFile]] = File(None),
    listings: ListingRepository = Depends(get_listing_repository),
    storage: ImageStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user),
):
    # 404 / 403 before storing anything
    listings.get_owned(listing_id, current_user.id, "update")
    listings.check_fields(fields, partial=True)

    refs = await storage.save_uploads(images or [])
    try:
        listing = listings.update(listing_id, current_user.id, fields, image_refs=refs)
    except Exception:
        storage.delete(refs)
        raise
    return ListingEnvelope(message="Laptop listing updated successfully", laptop=_to_read(listing))


@router.delete("/{listing_id}", response_model=MessageResponse)
def delete_laptop(
    listing_id: str,
    listings: ListingRepository = Depends(get_listing_repository),
    current_user: User = Depends(get_current_user),
):
    listings.delete(listing_id, current_user.id)
    return MessageResponse(message="Laptop listing deleted successfully")
