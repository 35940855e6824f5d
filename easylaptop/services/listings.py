"""
Listing repository: laptop listings, their ordered images, and search.

Field rules (required fields, enums, numeric coercion) live in
validate_listing_fields(), which returns a ValidationResult instead of
raising, so callers can check input before doing any other work.

Mutations go through get_owned(), which checks existence before ownership:
a missing listing is NotFound, someone else's listing is Forbidden.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from easylaptop.core.database import parse_row_id, utcnow
from easylaptop.core.errors import FieldError, NotFound, ValidationError
from easylaptop.models.listing import CONDITIONS, MAX_PRICE, MIN_YEAR, STATUSES, Listing
from easylaptop.models.listing_image import ListingImage
from easylaptop.models.user import User
from easylaptop.services.image_storage import ImageStorage
from easylaptop.services.ownership import ensure_owner

logger = logging.getLogger(__name__)

MY_COLLEGE = "myCollege"

REQUIRED_FIELDS = ("title", "description", "price", "brand")
LISTING_FIELDS = REQUIRED_FIELDS + (
    "model",
    "processor",
    "ram",
    "storage",
    "screen_size",
    "condition",
    "year",
    "contact_email",
    "contact_phone",
    "status",
)


@dataclass
class ValidationResult:
    cleaned: Dict[str, Any] = field(default_factory=dict)
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def max_year() -> int:
    # one model year ahead of the calendar
    return utcnow().year + 1


def validate_listing_fields(fields: Mapping[str, Any], partial: bool = False) -> ValidationResult:
    """Normalize raw listing input.

    Strings are trimmed and empty values dropped, so with partial=True only
    fields that were actually provided end up in `cleaned`.
    """
    result = ValidationResult()
    for name in LISTING_FIELDS:
        value = fields.get(name)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        result.cleaned[name] = value

    if not partial:
        for name in REQUIRED_FIELDS:
            if name not in result.cleaned:
                result.errors.append(FieldError(name, f"Please provide a {name}"))

    if "price" in result.cleaned:
        try:
            price = float(result.cleaned["price"])
        except (TypeError, ValueError, OverflowError):
            result.errors.append(FieldError("price", "Price must be a number"))
        else:
            if not math.isfinite(price):
                result.errors.append(FieldError("price", "Price must be a number"))
            elif price < 0:
                result.errors.append(FieldError("price", "Price cannot be negative"))
            elif price > MAX_PRICE:
                result.errors.append(FieldError("price", f"Price cannot be more than {MAX_PRICE:,.2f}"))
            result.cleaned["price"] = price

    if "year" in result.cleaned:
        try:
            year = int(result.cleaned["year"])
        except (TypeError, ValueError, OverflowError):
            result.errors.append(FieldError("year", "Year must be a whole number"))
        else:
            latest = max_year()
            if year < MIN_YEAR:
                result.errors.append(FieldError("year", f"Year must be {MIN_YEAR} or later"))
            elif year > latest:
                result.errors.append(FieldError("year", f"Year cannot be later than {latest}"))
            result.cleaned["year"] = year

    condition = result.cleaned.get("condition")
    if condition is not None and condition not in CONDITIONS:
        result.errors.append(FieldError("condition", f"Condition must be one of {', '.join(CONDITIONS)}"))

    listing_status = result.cleaned.get("status")
    if listing_status is not None and listing_status not in STATUSES:
        result.errors.append(FieldError("status", f"Status must be one of {', '.join(STATUSES)}"))

    return result


def _raise_for(result: ValidationResult, partial: bool) -> None:
    if result.ok:
        return
    missing = [e.field for e in result.errors if e.message.startswith("Please provide")]
    if missing and not partial:
        message = "Please provide title, description, price, and brand"
    else:
        message = result.errors[0].message
    raise ValidationError(message, errors=result.errors)


def _parse_price(raw: Optional[str], name: str) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a number", errors=[FieldError(name, "Must be a number")])
    return value


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class ListingFilter:
    search: Optional[str] = None
    brand: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    condition: Optional[str] = None
    status: Optional[str] = None
    college_filter: Optional[str] = None

    @classmethod
    def from_query(
        cls,
        search: Optional[str] = None,
        brand: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        condition: Optional[str] = None,
        status: Optional[str] = None,
        college_filter: Optional[str] = None,
    ) -> "ListingFilter":
        return cls(
            search=(search or "").strip() or None,
            brand=(brand or "").strip() or None,
            min_price=_parse_price(min_price, "minPrice"),
            max_price=_parse_price(max_price, "maxPrice"),
            condition=condition or None,
            status=status or None,
            college_filter=college_filter or None,
        )


class ListingRepository:
    def __init__(self, db: Session, storage: Optional[ImageStorage] = None, max_images: Optional[int] = None) -> None:
        self.db = db
        self.storage = storage
        self.max_images = max_images

    def _query(self):
        # [Important] load owner and images up front; every response needs both
        return (
            self.db.query(Listing)
            .options(joinedload(Listing.owner))
            .options(selectinload(Listing.images))
        )

    @staticmethod
    def _newest_first(query):
        return query.order_by(Listing.created_at.desc(), Listing.id.desc())

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_by_id(self, listing_id) -> Listing:
        pk = parse_row_id(listing_id)
        if pk is None:
            raise NotFound("Laptop not found")

        listing = self._query().filter(Listing.id == pk).first()
        if listing is None:
            raise NotFound("Laptop not found")
        return listing

    def get_owned(self, listing_id, caller_id, action: str = "update") -> Listing:
        listing = self.get_by_id(listing_id)
        ensure_owner(listing, caller_id, action)
        return listing

    def list(self, filters: Optional[ListingFilter] = None, caller: Optional[User] = None) -> List[Listing]:
        filters = filters or ListingFilter()
        query = self._query()

        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            query = query.filter(
                or_(
                    Listing.title.ilike(pattern, escape="\\"),
                    Listing.description.ilike(pattern, escape="\\"),
                    Listing.brand.ilike(pattern, escape="\\"),
                )
            )

        if filters.brand:
            query = query.filter(Listing.brand.ilike(f"%{_escape_like(filters.brand)}%", escape="\\"))

        if filters.min_price is not None:
            query = query.filter(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Listing.price <= filters.max_price)

        if filters.condition:
            query = query.filter(Listing.condition == filters.condition)

        # active only unless asked otherwise
        query = query.filter(Listing.status == (filters.status or "active"))

        if filters.college_filter == MY_COLLEGE and caller is not None and caller.college:
            college = caller.college.strip().lower()
            owner_ids = [
                row.id for row in self.db.query(User.id).filter(func.lower(func.trim(User.college)) == college)
            ]
            if not owner_ids:
                return []
            query = query.filter(Listing.owner_id.in_(owner_ids))

        return self._newest_first(query).all()

    def list_for_owner(self, owner_id) -> List[Listing]:
        query = self._query().filter(Listing.owner_id == owner_id)
        return self._newest_first(query).all()

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def check_fields(self, fields: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
        """Validate input and return the cleaned values, raising ValidationError."""
        result = validate_listing_fields(fields, partial=partial)
        _raise_for(result, partial)
        return result.cleaned

    def _check_image_count(self, image_refs: Sequence[str]) -> None:
        if self.max_images is not None and len(image_refs) > self.max_images:
            raise ValidationError(f"You can upload at most {self.max_images} images")

    def create(self, fields: Mapping[str, Any], owner: User, image_refs: Sequence[str] = ()) -> Listing:
        data = self.check_fields(fields)
        # new listings always start active
        data.pop("status", None)

        self._check_image_count(image_refs)

        data.setdefault("contact_email", owner.email)
        if owner.phone:
            data.setdefault("contact_phone", owner.phone)

        listing = Listing(**data, owner_id=owner.id)
        listing.images = [ListingImage(ref=ref, position=i) for i, ref in enumerate(image_refs)]

        self.db.add(listing)
        self.db.commit()
        logger.info("User %s created listing %s", owner.id, listing.id)
        return self.get_by_id(listing.id)

    def update(self, listing_id, caller_id, fields: Mapping[str, Any], image_refs: Sequence[str] = ()) -> Listing:
        listing = self.get_owned(listing_id, caller_id, "update")
        data = self.check_fields(fields, partial=True)

        self._check_image_count(image_refs)

        for name, value in data.items():
            setattr(listing, name, value)

        # new images go after the existing ones
        start = len(listing.images)
        for offset, ref in enumerate(image_refs):
            listing.images.append(ListingImage(ref=ref, position=start + offset))

        self.db.add(listing)
        self.db.commit()
        return self.get_by_id(listing.id)

    def delete(self, listing_id, caller_id) -> None:
        listing = self.get_owned(listing_id, caller_id, "delete")

        if self.storage is not None:
            self.storage.delete(listing.image_refs)

        self.db.delete(listing)
        self.db.commit()
        logger.info("User %s deleted listing %s", caller_id, listing_id)
