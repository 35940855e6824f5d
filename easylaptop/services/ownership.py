from easylaptop.core.errors import Forbidden
from easylaptop.models.listing import Listing


def is_owner(listing: Listing, caller_id) -> bool:
    return caller_id is not None and listing.owner_id == caller_id


def ensure_owner(listing: Listing, caller_id, action: str = "update") -> None:
    """Raise Forbidden unless caller_id created the listing.

    Callers must confirm the listing exists first; absence is a NotFound.
    """
    if not is_owner(listing, caller_id):
        raise Forbidden(f"You can only {action} your own listings")
